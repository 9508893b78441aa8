import os
import sys
import requests
from dotenv import load_dotenv

# Load .env variables
load_dotenv()

RELAY_URL = os.getenv("RELAY_URL", f"http://127.0.0.1:{os.getenv('PORT', '3000')}")

if len(sys.argv) != 3:
    print("usage: register_hook.py <event> <url>")
    sys.exit(2)

# Registration to send
payload = {
    "event": sys.argv[1],
    "url": sys.argv[2],
}

resp = requests.post(f"{RELAY_URL}/hooks/register", json=payload, timeout=30)

print("Status:", resp.status_code)
print("Response:", resp.json())
