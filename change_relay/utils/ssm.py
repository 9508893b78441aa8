# change_relay/utils/ssm.py
import boto3
import os

# Default region fallback (so code doesn't raise NoRegionError)
_REGION = os.getenv("AWS_DEFAULT_REGION", os.getenv("AWS_REGION", "us-east-1"))


def _ssm_client():
    return boto3.client("ssm", region_name=_REGION)


def parameter_name(name: str, prefix: str = "") -> str:
    """Join a settings name onto a path prefix such as ``/change-relay/prod``."""
    if not prefix:
        return name
    return f"{prefix.rstrip('/')}/{name}"


def get_param(name: str, prefix: str = "", decrypt: bool = True) -> str:
    """Fetch ``<prefix>/<name>`` from AWS SSM Parameter Store (raises on AWS errors)."""
    client = _ssm_client()
    resp = client.get_parameter(Name=parameter_name(name, prefix), WithDecryption=decrypt)
    return resp["Parameter"]["Value"]
