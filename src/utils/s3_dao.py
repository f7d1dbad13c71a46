"""
S3 Data Access Object for reading uploaded statements.
"""
import logging
import os
import boto3
from typing import Optional, Dict, Any
from botocore.exceptions import ClientError

from utils.import_config import get_import_config

logger = logging.getLogger(__name__)

def get_s3_client():
    return boto3.client('s3', region_name=os.environ.get('AWS_REGION', 'eu-west-2'))

def _bucket_or_default(bucket: Optional[str]) -> str:
    return bucket or get_import_config().import_bucket

def get_object(key: str, bucket: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """
    Get an object from S3.

    Args:
        key: The S3 key of the object to retrieve
        bucket: Optional bucket name (defaults to the configured import bucket)

    Returns:
        The S3 object response if successful, None otherwise
    """
    try:
        return get_s3_client().get_object(Bucket=_bucket_or_default(bucket), Key=key)
    except ClientError as e:
        logger.error(f"Error getting object from S3: {str(e)}")
        return None

def get_object_content(key: str, bucket: Optional[str] = None) -> Optional[bytes]:
    """
    Get the content of an S3 object.

    Returns:
        The object content as bytes if successful, None otherwise
    """
    response = get_object(key, bucket)
    if response:
        return response['Body'].read()
    return None

def get_object_metadata(key: str, bucket: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """
    Get the metadata of an S3 object without downloading its content.

    Returns:
        Dictionary containing object metadata if successful, None otherwise
        Includes: content_type, content_length, last_modified, e_tag
    """
    try:
        response = get_s3_client().head_object(Bucket=_bucket_or_default(bucket), Key=key)
        return {
            'content_type': response.get('ContentType'),
            'content_length': response.get('ContentLength'),
            'last_modified': response.get('LastModified'),
            'e_tag': response.get('ETag'),
        }
    except ClientError as e:
        logger.error(f"Error getting object metadata from S3: {str(e)}")
        return None
