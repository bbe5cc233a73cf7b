import json
import unittest

from scissorsconsole.bridge.protocol import (
    BridgeProtocol,
    DecodeError,
    decode_event,
    encode_command,
    encode_event,
    parse_command,
)
from scissorsconsole.core.models import (
    ChooseDirectory,
    ClearLog,
    FolderChosen,
    LogLine,
    Start,
    Stop,
    Telemetry,
)


class CommandWireTest(unittest.TestCase):
    def test_exact_wire_text(self):
        self.assertEqual(encode_command(Start(filename="run1.csv")), "start\nrun1.csv")
        self.assertEqual(encode_command(Stop()), "stop")
        self.assertEqual(encode_command(ClearLog()), "clear_log")
        self.assertEqual(encode_command(ChooseDirectory()), "choose_dir")

    def test_filename_is_not_escaped(self):
        self.assertEqual(encode_command(Start(filename="a\nb")), "start\na\nb")
        self.assertEqual(encode_command(Start(filename="")), "start\n")

    def test_unknown_command_is_a_type_error(self):
        with self.assertRaises(TypeError):
            encode_command("stop")

    def test_host_side_parse(self):
        self.assertEqual(parse_command("start\nrun1.csv"), Start(filename="run1.csv"))
        self.assertEqual(parse_command("start\n"), Start(filename=""))
        self.assertEqual(parse_command("stop"), Stop())
        self.assertEqual(parse_command("clear_log"), ClearLog())
        self.assertEqual(parse_command("choose_dir"), ChooseDirectory())

    def test_host_side_parse_rejects_unknown(self):
        for message in ("start", "init", "STOP", "stop\n", ""):
            with self.subTest(message=message):
                with self.assertRaises(DecodeError):
                    parse_command(message)


class EventDecodeTest(unittest.TestCase):
    def test_json_telemetry(self):
        line = json.dumps({"event": "telemetry", "timestamp_ns": 1000, "channels": [1.0, 2]})
        self.assertEqual(decode_event(line), Telemetry(timestamp_ns=1000, channels=(1.0, 2.0)))

    def test_json_telemetry_in_seconds(self):
        line = json.dumps({"event": "telemetry", "t_s": 1.5, "channels": [0.25]})
        self.assertEqual(decode_event(line), Telemetry(timestamp_ns=1_500_000_000, channels=(0.25,)))

    def test_legacy_csv_telemetry(self):
        self.assertEqual(
            decode_event("2000000000, 1.2, 2.2, 310\n"),
            Telemetry(timestamp_ns=2_000_000_000, channels=(1.2, 2.2, 310.0)),
        )

    def test_log_and_folder(self):
        self.assertEqual(
            decode_event('{"event": "log", "text": "INFO\\tstarted\\n"}'),
            LogLine(text="INFO\tstarted\n"),
        )
        self.assertEqual(
            decode_event('{"event": "folder", "path": "C:/data/run3"}'),
            FolderChosen(path="C:/data/run3"),
        )

    def test_lifecycle_notifications_become_log_lines(self):
        self.assertEqual(
            decode_event('{"event": "collection_started"}'),
            LogLine("INFO\tData collection started\n"),
        )
        self.assertEqual(
            decode_event('{"event": "collection_ended"}'),
            LogLine("INFO\tData collection ended\n"),
        )

    def test_large_csv_timestamp_keeps_every_nanosecond(self):
        event = decode_event("9007199254740993,1.0")
        self.assertEqual(event.timestamp_ns, 9_007_199_254_740_993)
        self.assertEqual(decode_event("18446744073709551615,1.0").timestamp_ns, 2**64 - 1)
        self.assertEqual(decode_event("1e3,1.0").timestamp_ns, 1000)

    def test_timestamp_beyond_uint64_is_rejected(self):
        for line in (
            "18446744073709551616,1.0",
            '{"event": "telemetry", "timestamp_ns": 18446744073709551616, "channels": [1.0]}',
        ):
            with self.assertRaises(DecodeError):
                decode_event(line)

    def test_malformed_lines(self):
        bad = [
            "",
            "   ",
            "not-telemetry",
            "{not json",
            "[1, 2]",
            '{"event": "bogus"}',
            '{"timestamp_ns": 1, "channels": [1.0]}',
            '{"event": "telemetry", "channels": [1.0]}',
            '{"event": "telemetry", "timestamp_ns": 1, "channels": []}',
            '{"event": "telemetry", "timestamp_ns": 1, "channels": ["x"]}',
            '{"event": "telemetry", "timestamp_ns": 1, "channels": [true]}',
            '{"event": "telemetry", "timestamp_ns": -5, "channels": [1.0]}',
            '{"event": "telemetry", "timestamp_ns": 1.5, "channels": [1.0]}',
            '{"event": "telemetry", "timestamp_ns": true, "channels": [1.0]}',
            '{"event": "log"}',
            '{"event": "folder", "path": 3}',
            "1000",
            "1000,abc",
            "abc,1.0",
            "1000,nan",
        ]
        for line in bad:
            with self.subTest(line=line):
                with self.assertRaises(DecodeError) as ctx:
                    decode_event(line)
                self.assertEqual(ctx.exception.line, line)

    def test_encode_event_is_decodable(self):
        events = [
            Telemetry(timestamp_ns=123, channels=(1.0, -2.5)),
            LogLine(text="WARN\tsomething\n"),
            FolderChosen(path="/tmp/x"),
        ]
        for event in events:
            with self.subTest(event=event):
                self.assertEqual(decode_event(encode_event(event)), event)


class BridgeProtocolTest(unittest.TestCase):
    def test_send_uses_the_channel_once(self):
        sent = []

        class _Channel:
            def send(self, message):
                sent.append(message)

        bridge = BridgeProtocol(_Channel())
        bridge.send(Start(filename="run1.csv"))
        bridge.send(Stop())

        self.assertEqual(sent, ["start\nrun1.csv", "stop"])


if __name__ == "__main__":
    unittest.main()
