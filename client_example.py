"""
Channel Chat Relay Client Example
Terminal stand-in for the browser room page, with demo scenarios
"""

import asyncio
import json
import websockets
from datetime import datetime
from typing import Optional, Any
import argparse
import sys

MIN_CHANNEL = 0
MAX_CHANNEL = 99999
MAX_NAME_LENGTH = 10

def validate_channel(channel: str) -> bool:
    """Channels are non-negative integers up to MAX_CHANNEL"""
    try:
        number = int(channel)
    except ValueError:
        return False
    return MIN_CHANNEL <= number <= MAX_CHANNEL

class ChatClient:
    """WebSocket chat client speaking the relay's init handshake"""

    def __init__(self, name: str, channel: str, server_url: str = "ws://localhost:8000"):
        self.name = (name or "名無し")[:MAX_NAME_LENGTH]
        self.channel = channel
        self.server_url = server_url
        self.websocket: Optional[Any] = None
        self.uuid: Optional[str] = None
        self.running = False

    async def connect(self) -> bool:
        """Connect to the relay"""
        if not validate_channel(self.channel):
            print(f"❌ Invalid channel: {self.channel} (expected {MIN_CHANNEL}-{MAX_CHANNEL})")
            return False

        try:
            self.websocket = await websockets.connect(self.server_url)
            print(f"✅ Connected to {self.server_url}")
            return True
        except Exception as e:
            print(f"❌ Connection failed: {e}")
            return False

    async def join_channel(self) -> bool:
        """Wait for the identifier and answer with channel and name"""
        if not self.websocket:
            return False

        try:
            data = json.loads(await self.websocket.recv())

            if not data.get("init"):
                print(f"❌ {data.get('message', 'Unexpected response')}")
                return False

            self.uuid = data.get("uuid")
            await self.websocket.send(json.dumps({
                "init": True,
                "uuid": self.uuid,
                "channel": self.channel,
                "name": self.name,
                "message": ""
            }))
            print(f"✅ Joined channel {self.channel} as {self.name} ({self.uuid})")
            return True

        except Exception as e:
            print(f"❌ Join failed: {e}")
            return False

    async def send_message(self, message: str) -> bool:
        """Send a chat message to the channel"""
        if not self.websocket:
            return False

        try:
            await self.websocket.send(json.dumps({
                "init": False,
                "uuid": self.uuid,
                "channel": self.channel,
                "name": self.name,
                "message": message
            }))
            return True

        except Exception as e:
            print(f"❌ Send failed: {e}")
            return False

    def render(self, data: dict):
        """Print one frame the way the room page lays it out"""
        msg_type = data.get("type")

        if msg_type == "count":
            print(f"👥 {data.get('count', 0)} in channel {data.get('channel')}")
        elif msg_type == "info":
            print(f"📢 {data.get('message', '')}")
        elif msg_type in ("mine", "other"):
            stamp = ""
            if data.get("time"):
                stamp = datetime.fromisoformat(data["time"]).astimezone().strftime("%m/%d %H:%M")
            sender = f"{data.get('name')}({data.get('uuid')})"
            arrow = "➡️ " if msg_type == "mine" else "⬅️ "
            print(f"{arrow}[{stamp}] {sender}: {data.get('message', '')}")
        else:
            print(f"❓ Unknown frame type: {msg_type}")

    async def listen_for_messages(self):
        """Listen for incoming frames"""
        if not self.websocket:
            return

        while self.running:
            try:
                message = await asyncio.wait_for(self.websocket.recv(), timeout=1.0)
                self.render(json.loads(message))

            except asyncio.TimeoutError:
                continue
            except websockets.exceptions.ConnectionClosed:
                print("🔌 Connection closed by server")
                break

    async def disconnect(self):
        """Disconnect from the relay"""
        self.running = False
        if self.websocket:
            await self.websocket.close()
            print(f"🔌 {self.name} disconnected")

    async def run_interactive(self):
        """Run interactive chat session"""
        if not await self.connect():
            return

        if not await self.join_channel():
            await self.disconnect()
            return

        self.running = True
        listen_task = asyncio.create_task(self.listen_for_messages())

        try:
            print("\n🎮 Interactive mode started!")
            print("Commands: /quit, or just type your message")
            print("-" * 50)

            while self.running:
                try:
                    user_input = (await asyncio.to_thread(input, f"{self.name}> ")).strip()
                except (KeyboardInterrupt, EOFError):
                    break

                if not user_input:
                    continue
                if user_input == "/quit":
                    break
                await self.send_message(user_input)

        finally:
            self.running = False
            listen_task.cancel()
            await self.disconnect()

async def _session(name: str, channel: str, server: str, messages, delay: float, linger: float):
    client = ChatClient(name, channel, server)
    await asyncio.sleep(delay)
    if await client.connect() and await client.join_channel():
        client.running = True
        listen_task = asyncio.create_task(client.listen_for_messages())

        for text in messages:
            await asyncio.sleep(1)
            await client.send_message(text)

        await asyncio.sleep(linger)
        client.running = False
        listen_task.cancel()
        await client.disconnect()

async def scenario_same_channel(server: str):
    """Scenario: two clients chatting in one channel"""
    print("\n🧪 Scenario: Same-Channel Chat")
    print("=" * 60)
    await asyncio.gather(
        _session("Alice", "42", server, ["hi", "how are you?"], 0, 3),
        _session("Bob", "42", server, ["hello Alice!"], 0.5, 2),
    )
    print("✅ Scenario completed")

async def scenario_isolation(server: str):
    """Scenario: channels do not see each other's traffic"""
    print("\n🧪 Scenario: Channel Isolation")
    print("=" * 60)
    await asyncio.gather(
        _session("Alice", "42", server, ["anyone in 42?"], 0, 3),
        _session("Carol", "7", server, ["anyone in 7?"], 0.5, 2),
    )
    print("✅ Scenario completed")

async def scenario_markup(server: str):
    """Scenario: markup in chat text comes back neutralized"""
    print("\n🧪 Scenario: Markup Neutralization")
    print("=" * 60)
    await _session("Mallory", "13", server, ["<script>alert(1)</script>"], 0, 2)
    print("✅ Scenario completed")

SCENARIOS = {
    "same-channel": scenario_same_channel,
    "isolation": scenario_isolation,
    "markup": scenario_markup,
}

async def main():
    """Main function with command line interface"""
    parser = argparse.ArgumentParser(description="Channel Chat Relay Client")
    parser.add_argument("--name", default="名無し", help="Display name (max 10 characters)")
    parser.add_argument("--channel", default="0", help=f"Channel number ({MIN_CHANNEL}-{MAX_CHANNEL})")
    parser.add_argument("--server", default="ws://localhost:8000", help="Server URL")
    parser.add_argument("--scenario", choices=sorted(SCENARIOS), help="Run a demo scenario")

    args = parser.parse_args()

    if args.scenario:
        await SCENARIOS[args.scenario](args.server)
    else:
        client = ChatClient(args.name, args.channel, args.server)
        await client.run_interactive()

if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except Exception as e:
        print(f"❌ Client error: {e}")
        sys.exit(1)
