"""Generic webhook channel adapter."""

import json

from schemawatch.channels import ChannelPayload, NotificationContext


def format_webhook(url: str, ctx: NotificationContext) -> ChannelPayload:
    """
    Format a schema change notification as plain JSON.

    Body::

        {"environment": ..., "repo": ..., "owner": ..., "commit": ...,
         "changes": [{"message": ..., "level": ..., "type": ...}]}
    """
    webhook_body = {
        "environment": ctx.environment,
        "repo": ctx.repo,
        "owner": ctx.owner,
        "commit": ctx.commit,
        "changes": [
            {
                "message": change.message,
                "level": change.criticality.value,
                "type": change.type,
            }
            for change in ctx.changes
        ],
    }

    return ChannelPayload(
        method="POST",
        url=url,
        headers={"Content-Type": "application/json"},
        body=json.dumps(webhook_body),
    )
