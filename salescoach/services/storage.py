import os
from werkzeug.utils import secure_filename
from flask import current_app
import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError


def _ensure_local_dir():
    d = current_app.config['LOCAL_STORAGE_DIR']
    os.makedirs(d, exist_ok=True)
    return d


def _s3_client():
    # endpoint_url may be empty for AWS-managed S3
    s3_kwargs = {}
    endpoint = current_app.config.get('S3_ENDPOINT')
    if endpoint:
        s3_kwargs['endpoint_url'] = endpoint
    region = current_app.config.get('S3_REGION')
    if region:
        s3_kwargs['region_name'] = region
    return boto3.client(
        's3',
        aws_access_key_id=current_app.config.get('S3_ACCESS_KEY'),
        aws_secret_access_key=current_app.config.get('S3_SECRET_KEY'),
        config=Config(signature_version='s3v4', s3={'addressing_style': 'virtual'}),
        **s3_kwargs,
    )


def _save_local(key, data):
    d = _ensure_local_dir()
    path = os.path.join(d, key)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'wb') as f:
        f.write(data)
    return f"file://{os.path.abspath(path)}"


def save_audio(filename, data, prefix="", content_type=None):
    """Store an uploaded audio payload and return its URL (file:// or s3://)."""
    backend = current_app.config.get('STORAGE_BACKEND', 'local')
    name = secure_filename(filename or '') or 'recording'
    key = f"{prefix}/{name}" if prefix else name

    if backend == 's3':
        bucket = current_app.config.get('S3_BUCKET')
        extra = {'ContentType': content_type} if content_type else {}
        try:
            _s3_client().put_object(Bucket=bucket, Key=key, Body=data, **extra)
            return f"s3://{bucket}/{key}"
        except (BotoCoreError, ClientError):
            current_app.logger.exception('S3 upload failed, falling back to local storage')
    return _save_local(key, data)


def download_bytes(url: str) -> bytes:
    if url.startswith('s3://'):
        bucket, key = url.replace('s3://', '').split('/', 1)
        obj = _s3_client().get_object(Bucket=bucket, Key=key)
        return obj['Body'].read()
    elif url.startswith('file://'):
        path = url.replace('file://', '')
        with open(path, 'rb') as f:
            return f.read()
    else:
        raise ValueError("Unsupported URL scheme")
