#!/usr/bin/env python3
"""
Socket.IO console client for the number guessing game server.

This client connects to the Flask-SocketIO server and allows interactive
gameplay from the command line.

Usage:
    python numguess_client.py http://localhost:8000

Commands:
    create <name> [digits] - Create a new room
    join <room_id> <name>  - Join an existing room
    secret <number>        - Commit your secret number
    ask <question>         - Ask your opponent a question
    answer <text>          - Answer the pending question
    guess <number>         - Guess your opponent's number
    say <text>             - Chat with the room
    surrender              - Give up the game
    quit                   - Exit the program
"""

import sys
from typing import Optional

import socketio


class NumGuessClient:
    """Socket.IO client for the number guessing game server."""

    def __init__(self, server_url: str):
        self.server_url = server_url.rstrip('/')
        self.sio = socketio.Client()
        self.room_id: Optional[str] = None
        self.setup_socketio_handlers()

    def setup_socketio_handlers(self):
        """Set up Socket.IO event handlers."""

        @self.sio.on('roomJoined')
        def on_room_joined(data):
            self.room_id = data['roomId']
            role = "host" if data.get('isHost') else "guest"
            print(f"✓ Joined room {self.room_id} as {role}")

        @self.sio.on('updateRoomState')
        def on_update(room):
            self.display_room(room)

        @self.sio.on('guessResult')
        def on_guess_result(data):
            if not data.get('success'):
                print("✗ Wrong guess, your turn is over.")

        @self.sio.on('gameOver')
        def on_game_over(data):
            room = data['room']
            self.display_room(room)
            winner = next((p['name'] for p in room['players'] if p['id'] == room['winner']), '?')
            print(f"🏁 Game over, {winner} wins ({room.get('reason')})")
            for player in room['players']:
                print(f"   {player['name']}'s number: {player.get('secretRaw') or 'not set'}")

        @self.sio.on('receiveMessage')
        def on_message(data):
            print(f"💬 {data['author']}: {data['text']}")

        @self.sio.on('playerLeft')
        def on_player_left(message):
            print(f"📴 {message}")

        @self.sio.on('error')
        def on_error(message):
            print(f"❌ Server error: {message}")

    def display_room(self, room):
        """Display the current room state."""
        me = self.sio.get_sid()
        names = {p['id']: p['name'] for p in room['players']}
        print(f"\n--- Room {room['id']} ({room['digits']} digits) ---")
        print(f"State: {room['state']}")
        for player in room['players']:
            marker = " (you)" if player['id'] == me else ""
            status = "ready" if player['ready'] else "not ready"
            print(f"  {player['name']}{marker}: {status}")
        if room['state'] == 'playing':
            holder = "you" if room['turn'] == me else names.get(room['turn'], '?')
            print(f"Turn: {holder}, {room['actionState']}")
        for entry in room['history'][-5:]:
            author = entry['author'] or '*'
            print(f"  [{entry['type']}] {author}: {entry['text']}")
        print("-------------------------\n")

    def handle_command(self, line: str) -> bool:
        """Run one command; return False to exit."""
        command, _, rest = line.partition(' ')
        rest = rest.strip()

        if command == 'quit':
            return False
        if command == 'create':
            parts = rest.split()
            if not parts:
                print("Usage: create <name> [digits]")
                return True
            digits = int(parts[1]) if len(parts) > 1 and parts[1].isdigit() else 5
            self.sio.emit('createRoom', {'username': parts[0], 'digits': digits})
        elif command == 'join':
            parts = rest.split(maxsplit=1)
            if len(parts) < 2:
                print("Usage: join <room_id> <name>")
                return True
            self.sio.emit('joinRoom', {'roomId': parts[0], 'username': parts[1]})
        elif self.room_id is None:
            print("Create or join a room first.")
        elif command == 'secret':
            self.sio.emit('submitSecret', {'roomId': self.room_id, 'secret': rest})
        elif command == 'ask':
            self.sio.emit('askQuestion', {'roomId': self.room_id, 'question': rest})
        elif command == 'answer':
            self.sio.emit('answerQuestion', {'roomId': self.room_id, 'answer': rest})
        elif command == 'guess':
            self.sio.emit('makeGuess', {'roomId': self.room_id, 'guess': rest})
        elif command == 'say':
            self.sio.emit('sendMessage', {'roomId': self.room_id, 'message': rest})
        elif command == 'surrender':
            self.sio.emit('surrender', self.room_id)
        else:
            print(f"Unknown command: {command}")
        return True

    def run(self):
        self.sio.connect(self.server_url)
        print(__doc__.split('Commands:')[1])
        try:
            while True:
                try:
                    line = input('> ').strip()
                except (EOFError, KeyboardInterrupt):
                    break
                if line and not self.handle_command(line):
                    break
        finally:
            self.sio.disconnect()


def main():
    if len(sys.argv) != 2:
        print("Usage: python numguess_client.py <server_url>")
        sys.exit(1)
    NumGuessClient(sys.argv[1]).run()


if __name__ == '__main__':
    main()
