import boto3
from botocore.client import Config as BotoConfig

from tubely.core.config import Settings


def make_s3_client(settings: Settings):
    # addressing "path" uniquement pour les endpoints custom (MinIO, localstack)
    cfg = BotoConfig(
        signature_version="s3v4",
        s3={"addressing_style": "path" if settings.S3_ENDPOINT else "auto"},
    )
    return boto3.client(
        "s3",
        endpoint_url=settings.S3_ENDPOINT,
        region_name=settings.S3_REGION,
        aws_access_key_id=settings.S3_KEY,
        aws_secret_access_key=settings.S3_SECRET,
        config=cfg,
    )


def public_object_url(settings: Settings, key: str) -> str:
    """
    URL publique d'un objet, fonction pure de la configuration et de la clé.
    Un seul schéma actif par déploiement : CloudFront si configuré, sinon S3 direct.
    """
    if settings.S3_CF_DISTRIBUTION:
        return f"{settings.S3_CF_DISTRIBUTION}/{key}"
    return f"https://{settings.S3_BUCKET}.s3.{settings.S3_REGION}.amazonaws.com/{key}"
