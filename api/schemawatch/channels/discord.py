"""Discord channel adapter."""

import json

from schemawatch.channels import ChannelPayload, NotificationContext
from schemawatch.channels.formatting import coderize, environment_label, pluralize, truncate
from schemawatch.diff import Criticality

_EMOJI = {
    Criticality.BREAKING: ":x:",
    Criticality.DANGEROUS: ":warning:",
    Criticality.NON_BREAKING: ":white_check_mark:",
}

# Discord rejects message content longer than this
MAX_CONTENT_LENGTH = 2000


def format_discord(url: str, ctx: NotificationContext) -> ChannelPayload:
    """Format a schema change notification for a Discord webhook."""
    count = len(ctx.changes)
    header = (
        f":detective: Hi, I found **{count} {pluralize('change', count)}**"
        f"{environment_label(ctx.environment, bold='**')} of `{ctx.owner}/{ctx.repo}`"
    )
    if ctx.commit_url:
        header += f" ([{ctx.commit[:7]}]({ctx.commit_url}))"

    lines = [f"{_EMOJI[change.criticality]} {coderize(change.message)}" for change in ctx.changes]
    content = f"{header}:\n\n" + "\n".join(lines)

    discord_body = {
        "username": "SchemaWatch",
        "content": truncate(content, MAX_CONTENT_LENGTH),
    }

    return ChannelPayload(
        method="POST",
        url=url,
        headers={"Content-Type": "application/json"},
        body=json.dumps(discord_body),
    )
