from chatrelay.protocol import DeliveryLog, FileChunkMessage, TextMessage


def _text(seq, payload="p"):
    return TextMessage(sender="alice", recipient="bob", seq=seq, payload=payload)


def _chunk(index, seq=100):
    return FileChunkMessage(
        sender="alice",
        recipient="bob",
        seq=seq,
        file_name="notes.txt",
        chunk_index=index,
        total_chunks=2,
    )


def test_poll_returns_messages_past_watermark_in_order():
    log = DeliveryLog()
    for seq in range(4):
        log.append("bob", _text(seq))

    assert [m.seq for m in log.poll("bob", -1)] == [0, 1, 2, 3]
    assert [m.seq for m in log.poll("bob", 1)] == [2, 3]
    assert log.poll("bob", 3) == []


def test_poll_is_replayable():
    log = DeliveryLog()
    log.append("bob", _text(0))
    log.append("bob", _text(1))

    first = log.poll("bob", 0)
    second = log.poll("bob", 0)

    assert first == second
    assert [m.seq for m in first] == [1]
    assert len(log.entries("bob")) == 2


def test_unknown_recipient_polls_empty():
    assert DeliveryLog().poll("nobody", -1) == []


def test_chunks_are_returned_when_appended_after_watermark_position():
    log = DeliveryLog()
    log.append("bob", _text(0))
    log.append("bob", _chunk(0))
    log.append("bob", _text(1))
    log.append("bob", _chunk(1))

    everything = log.poll("bob", -1)
    assert [m.kind.value for m in everything] == ["text", "file_chunk", "text", "file_chunk"]

    after_first = log.poll("bob", 0)
    assert [(m.kind.value, m.seq) for m in after_first] == [
        ("file_chunk", 100),
        ("text", 1),
        ("file_chunk", 100),
    ]

    after_second = log.poll("bob", 1)
    assert [(m.kind.value, getattr(m, "chunk_index", None)) for m in after_second] == [
        ("file_chunk", 1)
    ]


def test_logs_are_kept_per_recipient():
    log = DeliveryLog()
    log.append("bob", _text(0))
    log.append("carol", TextMessage(sender="alice", recipient="carol", seq=0, payload="c"))

    assert [m.payload for m in log.poll("carol", -1)] == ["c"]
    assert len(log) == 2
