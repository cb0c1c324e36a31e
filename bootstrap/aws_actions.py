"""
AWS action primitives for seeding configuration.

Exposed functions (signatures):
    create_or_update_secret(
        secrets_client,
        name: str,
        payload: dict[str, str],
        *,
        tags: list[dict[str, str]] | None = None,
        kms_key_id: str | None = None,
        dry_run: bool = False,
    ) -> str

Behavior:
    - Creates a secret with optional KMS key and tags, or updates its value if it exists.
    - Applies/overwrites provided tag keys on existing secrets via TagResource.
    - Never prints secret payload, only the secret name and key names.

Raises:
    botocore.exceptions.BotoCoreError / ClientError for AWS API failures.

Example:
    >>> create_or_update_secret(secrets_client=sm, name="paylink/dev",
    ...                         payload={"STRIPE_SECRET_KEY": "sk_test_..."}, dry_run=True)
    [DRY-RUN] Secrets upsert name='paylink/dev' keys=['STRIPE_SECRET_KEY']
    'previewed'
"""

from __future__ import annotations

import json


def create_or_update_secret(
    secrets_client,
    name: str,
    payload: dict[str, str],
    *,
    tags: list[dict[str, str]] | None = None,
    kms_key_id: str | None = None,
    dry_run: bool = False,
) -> str:
    """Create or update an AWS Secrets Manager secret.

    Steps:
        - Check if the secret exists (DescribeSecret).
        - If new: CreateSecret(Name, SecretString, KmsKeyId?, Tags?).
        - If existing: PutSecretValue(SecretId, SecretString), then TagResource.

    Returns:
        str: 'previewed', 'created' or 'updated'.

    Raises:
        botocore.exceptions.BotoCoreError / ClientError: On AWS API failures.
    """
    msg = f"Secrets upsert name='{name}' keys={sorted(payload)}"
    if dry_run:
        print("[DRY-RUN]", msg)
        return "previewed"

    try:
        arn = secrets_client.describe_secret(SecretId=name).get("ARN")
    except secrets_client.exceptions.ResourceNotFoundException:
        kwargs = {"Name": name, "SecretString": json.dumps(payload)}
        if kms_key_id:
            kwargs["KmsKeyId"] = kms_key_id
        if tags:
            kwargs["Tags"] = tags
        secrets_client.create_secret(**kwargs)
        print(msg + " [created]")
        return "created"

    secrets_client.put_secret_value(SecretId=name, SecretString=json.dumps(payload))
    print(msg + " [updated]")
    if tags:
        secrets_client.tag_resource(SecretId=arn or name, Tags=tags)
    return "updated"
