"""Slack channel adapter."""

import json

from schemawatch.channels import ChannelPayload, NotificationContext
from schemawatch.channels.formatting import (
    coderize,
    environment_label,
    group_by_criticality,
    pluralize,
    truncate,
)
from schemawatch.diff import Criticality

_ATTACHMENT_STYLE = {
    Criticality.BREAKING: ("Breaking changes", "#E74C3B"),
    Criticality.DANGEROUS: ("Dangerous changes", "#F0C418"),
    Criticality.NON_BREAKING: ("Safe changes", "#23B99A"),
}


def format_slack(url: str, ctx: NotificationContext) -> ChannelPayload:
    """
    Format a schema change notification for a Slack incoming webhook.

    Changes are split into one colored attachment per criticality level.
    """
    count = len(ctx.changes)
    text = (
        f":male-detective: Hi, I found *{count} {pluralize('change', count)}*"
        f"{environment_label(ctx.environment)} of `{ctx.owner}/{ctx.repo}`"
    )
    if ctx.commit_url:
        text += f" (<{ctx.commit_url}|{ctx.commit[:7]}>)"
    text += ":"

    attachments = []
    for level, changes in group_by_criticality(ctx.changes).items():
        if not changes:
            continue
        title, color = _ATTACHMENT_STYLE[level]
        lines = "\n".join(f"- {coderize(change.message)}" for change in changes)
        attachments.append({
            "mrkdwn_in": ["text", "fallback"],
            "color": color,
            "author_name": title,
            "text": truncate(lines, 3000),
            "fallback": truncate(lines, 3000),
        })

    slack_body = {
        "username": "SchemaWatch",
        "text": text,
        "attachments": attachments,
    }

    return ChannelPayload(
        method="POST",
        url=url,
        headers={"Content-Type": "application/json"},
        body=json.dumps(slack_body),
    )
