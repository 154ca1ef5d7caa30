import asyncio
from prompt_toolkit import PromptSession
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console
from rich.panel import Panel
from rich.theme import Theme

from pairup.client.chat_session import ChatSession
from pairup.utils.config import ClientConfig
from pairup.utils.validators import parse_interest_list

custom_theme = Theme({
    "info": "dim cyan",
    "warning": "magenta",
    "danger": "bold red",
    "success": "bold green",
    "chat_peer": "green",
    "chat_self": "cyan",
})

console = Console(theme=custom_theme)

HELP_TEXT = "[dim]/next new partner  /skip end chat  /find search  /cancel stop searching  /quit exit[/dim]"

class PairupCLI:
    def __init__(self, config: ClientConfig = None):
        config = config or ClientConfig.from_env()
        self.chat = ChatSession(self.ui_callback, uri=config.server_uri)
        self.session = PromptSession()
        self.running = True
        self.pending = set()
        self.session.default_buffer.on_text_changed += self.on_text_changed

    def on_text_changed(self, buffer):
        task = asyncio.ensure_future(self.chat.update_typing(buffer.text))
        self.pending.add(task)
        task.add_done_callback(self.pending.discard)

    def ui_callback(self, event_type, data=None):
        # Called from the transport listen task when the server sends something
        if event_type == "USER_ID":
            console.print(f"[info]Connected as {data}[/info]")
        elif event_type == "ONLINE":
            console.print(f"[info]{data} online[/info]")
        elif event_type == "SEARCHING":
            console.print("[info]Looking for a stranger...[/info]")
        elif event_type == "SEARCH_CANCELLED":
            console.print("[warning]Search cancelled.[/warning]")
        elif event_type == "PARTNER_FOUND":
            console.print(Panel("[bold green]You're now chatting with a random stranger.[/bold green]\n" + HELP_TEXT, expand=False))
        elif event_type == "MESSAGE":
            console.print(f"[chat_peer]Stranger:[/chat_peer] {data}")
        elif event_type == "TYPING":
            if data:
                console.print("[dim]Stranger is typing...[/dim]")
        elif event_type == "GAME":
            name, payload = data
            console.print(f"[dim]Stranger sent {name} {payload or ''}[/dim]")
        elif event_type == "PARTNER_LEFT":
            console.print("[danger]Stranger has disconnected.[/danger] Type /find to meet someone new.")
        elif event_type == "CHAT_ENDED":
            console.print("[warning]You left the chat.[/warning]")
        elif event_type == "DISCONNECTED":
            console.print("[danger]Lost connection to server.[/danger]")
            self.running = False
        elif event_type == "DESTROYED":
            console.print("[danger]Bye.[/danger]")
            self.running = False

    async def handle_command(self, text: str) -> bool:
        """Returns False when the user asked to quit."""
        command = text.lower()
        if command == "/quit":
            await self.chat.close()
            return False
        if command == "/next":
            await self.chat.next_partner()
        elif command == "/skip":
            await self.chat.skip()
        elif command == "/find":
            await self.chat.find_partner()
        elif command == "/cancel":
            await self.chat.cancel_search()
        elif command.startswith("/"):
            console.print(HELP_TEXT)
        elif await self.chat.send_message(text):
            console.print(f"[chat_self]You:[/chat_self] {text}")
        else:
            console.print("[warning]Not in a chat. /find to look for someone.[/warning]")
        return True

    async def run(self):
        console.clear()
        console.print(Panel.fit("[bold white]PAIRUP[/bold white]\n[dim]Talk to strangers.[/dim]", style="blue"))

        # 1. Interests
        line = await self.session.prompt_async("Interests (comma separated, optional): ")
        interests = parse_interest_list(line)

        # 2. Connect and search
        try:
            await self.chat.start()
        except Exception as e:
            console.print(f"[danger]Failed to start: {e}[/danger]")
            return
        await self.chat.find_partner(interests)

        # 3. Chat Loop
        with patch_stdout():
            while self.running:
                try:
                    text = (await self.session.prompt_async("You: ")).strip()
                    if text and not await self.handle_command(text):
                        break
                except (EOFError, KeyboardInterrupt):
                    await self.chat.close()
                    break
