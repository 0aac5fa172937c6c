import io
import unittest
from contextlib import redirect_stdout

from lanchat.client import ChatTerminal
from lanchat.protocol import Message

from .fakes import PEER_A, SELF_IP, make_chat


class ChatTerminalTest(unittest.TestCase):

    def setUp(self):
        self.chat, self.sock = make_chat()
        self.term = ChatTerminal(self.chat)
        self.term.running.set()

    def test_plain_line_is_submitted(self):
        self.term.handle_line("hello there")
        self.assertEqual(self.chat.history, [(SELF_IP, "hello there")])
        self.assertEqual(len(self.sock.sent), 255)

    def test_quit_aliases(self):
        for line in ("/quit", "qqq", "  /QUIT "):
            self.term.running.set()
            self.term.handle_line(line)
            self.assertFalse(self.term.running.is_set())
        self.assertEqual(self.sock.sent, [])

    def test_peers_command_lists_registry(self):
        self.chat.peers.add(PEER_A)
        out = io.StringIO()
        with redirect_stdout(out):
            self.term.handle_line("/peers")
        self.assertIn(PEER_A, out.getvalue())
        self.assertIn("1 peer(s)", out.getvalue())

    def test_tick_dispatches_and_renders(self):
        self.chat.transport.inbox.put_nowait((PEER_A, Message.text("from afar")))
        self.term.lines.put("/status")
        out = io.StringIO()
        with redirect_stdout(out):
            self.term.tick()
        self.assertIn("from afar", out.getvalue())
        self.assertIn(PEER_A, self.chat.peers)

    def test_eof_stops_the_loop(self):
        self.term.lines.put(None)
        self.term.tick()
        self.assertFalse(self.term.running.is_set())

    def test_render_restarts_after_clear(self):
        out = io.StringIO()
        with redirect_stdout(out):
            self.term.handle_line("one")
            self.term.tick()
            self.term.handle_line("/clear")
            self.term.handle_line("two")
            self.term.tick()
        self.assertEqual(out.getvalue().count("one"), 1)
        self.assertEqual(out.getvalue().count("two"), 1)


if __name__ == "__main__":
    unittest.main()
