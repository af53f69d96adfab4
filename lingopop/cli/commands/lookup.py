"""Lookup, tutor chat and speech commands."""

import asyncio
import base64
import binascii
import logging
from pathlib import Path

import typer
from rich.prompt import Prompt

from lingopop.audio.player import AudioPlayer
from lingopop.cli.utils.async_runner import run_async
from lingopop.cli.utils.console import console, error_console
from lingopop.cli.utils.display import entry_panel
from lingopop.cli.utils.progress import create_spinner
from lingopop.cli.utils.services import get_storage, open_notebook, require_gateway
from lingopop.errors import LookupFailed
from lingopop.languages import is_supported_language
from lingopop.schemas import DictionaryEntry
from lingopop.services.chat import ChatSession
from lingopop.services.gemini import GeminiGateway
from lingopop.services.lookup import LookupOrchestrator

logger = logging.getLogger(__name__)

QUIT_WORDS = {"/quit", "/exit", "/q"}


def _check_language(code: str) -> None:
    if code and not is_supported_language(code):
        console.print(f"[warning]'{code}' is not a listed language; passing it through as-is.[/]")


async def _run_lookup(
    orchestrator: LookupOrchestrator,
    term: str,
    native: str,
    target: str,
    model: str,
) -> DictionaryEntry:
    """Run the text phase behind a spinner, exiting on failure."""
    with create_spinner() as progress:
        progress.add_task(f"Consulting the AI brain about '{term}'...", total=None)
        try:
            return await orchestrator.lookup(term, native or None, target or None, model or None)
        except LookupFailed as e:
            error_console.print(f"[error]Lookup failed: {e}[/]")
            raise typer.Exit(1) from None


def _write_image(entry: DictionaryEntry, path: Path) -> bool:
    if not entry.image_data:
        return False
    try:
        data = base64.b64decode(entry.image_data)
    except binascii.Error as e:
        error_console.print(f"[error]Illustration data is corrupt: {e}[/]")
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return True


def lookup(
    term: str = typer.Argument(..., help="Word or phrase to look up"),
    native: str = typer.Option("", "--native", "-n", help="Your language code"),
    target: str = typer.Option("", "--target", "-t", help="Language being learned"),
    model: str = typer.Option("", "--model", "-m", help="Gemini text model id"),
    save: bool = typer.Option(False, "--save", "-s", help="Save the entry to the notebook"),
    speak: bool = typer.Option(False, "--speak", help="Read the term aloud"),
    image_out: Path | None = typer.Option(None, "--image-out", help="Write the illustration here"),
    no_wait: bool = typer.Option(False, "--no-wait", help="Do not wait for the illustration"),
) -> None:
    """Look up a term and show its enriched dictionary entry."""
    _check_language(native)
    _check_language(target)
    run_async(_lookup(term, native, target, model, save, speak, image_out, no_wait))


async def _lookup(
    term: str,
    native: str,
    target: str,
    model: str,
    save: bool,
    speak: bool,
    image_out: Path | None,
    no_wait: bool,
) -> DictionaryEntry:
    """Async implementation of lookup command."""
    storage = get_storage()
    gateway = await require_gateway(storage)
    notebook = await open_notebook(storage)
    orchestrator = LookupOrchestrator(gateway)

    entry = await _run_lookup(orchestrator, term, native, target, model)
    console.print(entry_panel(entry, saved=notebook.is_saved(entry.term)))

    if not no_wait:
        with create_spinner() as progress:
            progress.add_task("Drawing an illustration...", total=None)
            await orchestrator.wait_for_images()
        entry = orchestrator.current or entry

        if entry.has_image:
            console.print("[success]Illustration ready.[/]")
            if image_out and _write_image(entry, image_out):
                console.print(f"[dim]Illustration written to {image_out}[/]")
        else:
            console.print("[dim]No illustration this time.[/]")

    if save:
        if notebook.is_saved(entry.term):
            console.print(f"[dim]'{entry.term}' is already in your notebook.[/]")
        else:
            await notebook.toggle_save(entry)
            console.print(f"[success]Saved '{entry.term}' to your notebook.[/]")

    if speak:
        await AudioPlayer().speak(entry.term, gateway)

    return entry


def chat(
    term: str = typer.Argument(..., help="Word or phrase to talk about"),
    target: str = typer.Option("", "--target", "-t", help="Language being learned"),
    model: str = typer.Option("", "--model", "-m", help="Gemini text model id"),
) -> None:
    """Look up a term, then ask the tutor questions about it."""
    _check_language(target)
    run_async(_chat(term, target, model))


async def _chat(term: str, target: str, model: str) -> None:
    """Async implementation of chat command."""
    gateway = await require_gateway()
    orchestrator = LookupOrchestrator(gateway)
    entry = await _run_lookup(orchestrator, term, "", target, model)
    console.print(entry_panel(entry))

    session = ChatSession(gateway, entry, target or None, model or None)
    orchestrator.add_listener(session.bind)
    console.print("[dim]Ask anything about this word. Type /quit to leave.[/]\n")

    while True:
        # Read input off the event loop so the illustration keeps loading
        text = await asyncio.to_thread(Prompt.ask, "[bold]You[/]", console=console)
        if text.strip().lower() in QUIT_WORDS:
            break
        await _chat_turn(session, text)


async def _chat_turn(session: ChatSession, text: str) -> str | None:
    """Send one message and print the reply."""
    with create_spinner() as progress:
        progress.add_task("Tutor is typing...", total=None)
        reply = await session.ask(text)

    if reply is None:
        if text.strip():
            console.print("[warning]The tutor could not answer. Try again.[/]")
        return None

    console.print(f"[tutor]Tutor:[/] {reply.text}\n")
    return reply.text


def speak(
    text: str = typer.Argument(..., help="Text to read aloud"),
    voice: str = typer.Option("", "--voice", "-v", help="Prebuilt Gemini voice name"),
) -> None:
    """Read a word or sentence aloud."""
    run_async(_speak(text, voice))


async def _speak(text: str, voice: str, gateway: GeminiGateway | None = None) -> bool:
    """Async implementation of speak command."""
    gateway = gateway or await require_gateway()
    with create_spinner() as progress:
        progress.add_task("Speaking...", total=None)
        played = await AudioPlayer().speak(text, gateway, voice or None)

    if not played:
        error_console.print("[warning]Could not play audio. See the log for details.[/]")
    return played
