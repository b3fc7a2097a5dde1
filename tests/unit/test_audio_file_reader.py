"""Unit tests for AudioFileReader and AudioPublisher."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from pubsub import pub

from streamscribe.audio.audio_pub import AudioPublisher
from streamscribe.audio.file_reader import AudioFileReader


@pytest.fixture
def audio_file(temp_data_dir):
    path = Path(temp_data_dir) / "speech.flac"
    path.write_bytes(bytes(range(256)) * 10)  # 2560 bytes
    return str(path)


@pytest.mark.unit
class TestAudioFileReader:

    def test_streams_all_chunks_last_one_final(self, audio_file):
        callback = MagicMock()
        reader = AudioFileReader(audio_file, callback=callback, chunk_size=1000)

        assert reader.stream() == 3

        events = [c.args[0] for c in callback.call_args_list]
        assert [len(e.audio_data) for e in events] == [1000, 1000, 560]
        assert [e.final for e in events] == [False, False, True]
        assert [e.sequence_number for e in events] == [0, 1, 2]
        assert b"".join(e.audio_data for e in events) == Path(audio_file).read_bytes()
        assert reader.total_bytes == 2560

    def test_empty_file_publishes_nothing(self, temp_data_dir):
        path = Path(temp_data_dir) / "empty.flac"
        path.write_bytes(b"")
        callback = MagicMock()

        assert AudioFileReader(str(path), callback=callback).stream() == 0
        callback.assert_not_called()

    def test_stop_before_stream_ends(self, audio_file):
        reader = None

        def stop_after_first(event):
            reader.stop()

        reader = AudioFileReader(audio_file, callback=stop_after_first, chunk_size=100)

        assert reader.stream() == 1

    def test_missing_file(self, temp_data_dir):
        with pytest.raises(FileNotFoundError):
            AudioFileReader(str(Path(temp_data_dir) / "missing.flac"), callback=MagicMock())

    def test_invalid_chunk_size(self, audio_file):
        with pytest.raises(ValueError):
            AudioFileReader(audio_file, callback=MagicMock(), chunk_size=0)

    def test_publisher_delivers_events(self, audio_file):
        received = []

        def listener(event):
            received.append(event)

        pub.subscribe(listener, "test.audio.reader")
        try:
            publisher = AudioPublisher("test.audio.reader")
            AudioFileReader(audio_file, callback=publisher.publish_audio_event, chunk_size=2560).stream()
        finally:
            pub.unsubscribe(listener, "test.audio.reader")

        assert len(received) == 1
        assert received[0].final is True
