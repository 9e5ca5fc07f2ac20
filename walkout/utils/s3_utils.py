# walkout/utils/s3_utils.py

import os
import json
import logging
import boto3
from walkout.config.settings import S3_BUCKET

# Set up logging
logger = logging.getLogger(__name__)

_S3 = None
_BUCKET = S3_BUCKET


def get_client():
    """Create the S3 client on first use."""
    global _S3
    if _S3 is None:
        _S3 = boto3.client(
            "s3",
            aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
            region_name=os.getenv("AWS_DEFAULT_REGION"),
        )
    return _S3


def list_objects(prefix: str):
    """List all object keys in the bucket under a prefix."""
    paginator = get_client().get_paginator("list_objects_v2")
    keys = []
    for page in paginator.paginate(Bucket=_BUCKET, Prefix=prefix):
        for obj in page.get("Contents", []):
            keys.append(obj["Key"])
    logger.debug(f"Listed {len(keys)} objects under {prefix}")
    return keys


def get_s3_json(key: str) -> dict:
    """Get JSON data from an S3 object."""
    response = get_client().get_object(Bucket=_BUCKET, Key=key)
    return json.loads(response['Body'].read().decode('utf-8'))
