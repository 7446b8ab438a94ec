"""CLI commands for managing chats."""

import json

import click

from ..platform.client import PlatformAPIError, PlatformClient
from ..platform.config import CLIConfig
from ..platform.types import ChatMessage
from ..utils import format_timestamp, short_id, truncate
from . import fail, report_api_error

MAX_CONTENT_LENGTH = 500


@click.group()
def chats():
    """Manage chats."""
    pass


@chats.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def list_chats(config: CLIConfig, as_json: bool):
    """List all chats."""
    client = PlatformClient(config)

    try:
        chat_list = client.list_chats()
    except PlatformAPIError as e:
        report_api_error(e, "list chats")

    if as_json:
        click.echo(json.dumps([c.model_dump(by_alias=True) for c in chat_list], indent=2))
        return

    if not chat_list:
        click.echo("No chats found.")
        return

    click.echo(f"Found {len(chat_list)} chat(s):\n")
    click.echo(f"{'ID':<12} {'TITLE':<30} {'MESSAGES':<9} {'MODEL':<20} {'CREATED':<14}")
    click.echo("-" * 89)
    for chat in chat_list:
        created = format_timestamp(chat.created_at, short=True)
        model = chat.model_used or "N/A"
        click.echo(
            f"{short_id(chat.id):<12} {truncate(chat.title, 30):<30} "
            f"{chat.message_count:<9} {truncate(model, 20):<20} {created:<14}"
        )


@chats.command("show")
@click.argument("chat_id")
@click.pass_obj
def show_chat(config: CLIConfig, chat_id: str):
    """Show details of a chat."""
    client = PlatformClient(config)

    try:
        chat = client.get_chat(chat_id)
    except PlatformAPIError as e:
        report_api_error(e, "get chat")

    click.echo(f"Chat:     {click.style(chat.title, bold=True)}")
    click.echo(f"ID:       {chat.id}")
    click.echo(f"Messages: {chat.message_count}")
    if chat.model_used:
        click.echo(f"Model:    {chat.model_used}")
    if chat.summary:
        click.echo(f"Summary:  {chat.summary}")
    click.echo(f"Created:  {format_timestamp(chat.created_at)}")
    click.echo(f"Updated:  {format_timestamp(chat.updated_at)}")


def _print_message(msg: ChatMessage) -> None:
    color = "green" if msg.role == "assistant" else "blue"
    time_part = format_timestamp(msg.created_at)[-8:]
    click.echo(
        f"{click.style(f'#{msg.message_index}', fg=color)} [{time_part}] "
        f"{click.style(msg.role, fg=color)}:"
    )
    click.echo(f"  {truncate(msg.content, MAX_CONTENT_LENGTH)}")


@chats.command("history")
@click.argument("chat_id")
@click.option(
    "--limit", default=0, type=int, help="Show only the last N messages (0 = all)"
)
@click.pass_obj
def chat_history(config: CLIConfig, chat_id: str, limit: int):
    """Show the message history of a chat."""
    client = PlatformClient(config)

    try:
        messages = client.get_chat_history(chat_id)
    except PlatformAPIError as e:
        report_api_error(e, "get chat history")

    if limit > 0:
        messages = messages[-limit:]

    if not messages:
        click.echo("No messages found.")
        return

    click.echo(f"Showing {len(messages)} message(s):\n")
    for i, msg in enumerate(messages):
        if i:
            click.echo()
        _print_message(msg)


@chats.command("create")
@click.option("--title", default=None, help="Chat title")
@click.option("--model", default="", help="Model to use for the chat")
@click.pass_obj
def create_chat(config: CLIConfig, title: str | None, model: str):
    """Create a new chat."""
    if not title:
        fail("--title is required")

    client = PlatformClient(config)

    try:
        chat = client.create_chat(title, model)
    except PlatformAPIError as e:
        report_api_error(e, "create chat")

    click.echo(click.style("Chat created successfully!", fg="green"))
    click.echo(f"ID:    {chat.id}")
    click.echo(f"Title: {chat.title}")
    if chat.model_used:
        click.echo(f"Model: {chat.model_used}")


@chats.command("delete")
@click.argument("chat_id")
@click.option("--force", is_flag=True, help="Confirm deletion")
@click.pass_obj
def delete_chat(config: CLIConfig, chat_id: str, force: bool):
    """Delete a chat and all of its messages."""
    if not force:
        click.echo(
            click.style(
                "WARNING: This will permanently delete the chat and all messages.",
                fg="yellow",
            )
        )
        click.echo("Use --force to confirm deletion.")
        return

    client = PlatformClient(config)

    try:
        client.delete_chat(chat_id)
    except PlatformAPIError as e:
        report_api_error(e, "delete chat")

    click.echo(click.style("Chat deleted successfully!", fg="green"))
