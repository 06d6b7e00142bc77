def _chunk(client, index, data, *, seq, total=2, file_name="report.pdf"):
    return client.post(
        "/upload-chunk",
        json={
            "sender": "alice",
            "receiver": "bob",
            "fileName": file_name,
            "chunkIndex": index,
            "totalChunks": total,
            "chunkData": data,
            "seq": seq,
        },
    )


def test_upload_and_download_chunks(client):
    assert _chunk(client, 1, "d29ybGQ=", seq=11).json() == {"ack": 11, "status": "chunk_received"}
    assert _chunk(client, 0, "aGVsbG8g", seq=10).json() == {"ack": 10, "status": "chunk_received"}

    resp = client.get("/download-file", params={"fileName": "report.pdf", "receiver": "bob"})
    assert resp.status_code == 200
    assert resp.json() == {"fileName": "report.pdf", "chunks": ["aGVsbG8g", "d29ybGQ="]}


def test_chunk_notifications_reach_recipient_poll(client):
    _chunk(client, 0, "YQ==", seq=3)

    body = client.get("/receive", params={"user": "bob", "lastAck": -1}).json()

    assert body["ack"] == -1
    assert len(body["messages"]) == 1
    note = body["messages"][0]
    assert note["type"] == "file_chunk"
    assert note["message"] == "File chunk: report.pdf"
    assert note["fileName"] == "report.pdf"
    assert note["chunkIndex"] == 0
    assert note["totalChunks"] == 2
    assert note["seq"] == 3


def test_chunks_do_not_touch_text_sequencing(client):
    _chunk(client, 0, "YQ==", seq=9)

    assert client.post(
        "/send-message", json={"sender": "alice", "receiver": "bob", "seq": 0, "message": "hi"}
    ).json() == {"ack": 0}


def test_download_of_unknown_file_is_empty(client):
    resp = client.get("/download-file", params={"fileName": "missing.bin", "receiver": "bob"})
    assert resp.json() == {"fileName": "missing.bin", "chunks": []}


def test_invalid_chunk_metadata_is_rejected(client):
    assert _chunk(client, 2, "YQ==", seq=0, total=2).status_code == 400
    assert _chunk(client, 0, "YQ==", seq=0, total=0).status_code == 400
    assert _chunk(client, 0, "YQ==", seq=0, file_name="").status_code == 400
    assert client.get("/download-file", params={"fileName": "x"}).status_code == 400


def test_negative_chunk_seq_is_rejected(client):
    resp = _chunk(client, 0, "YQ==", seq=-7)

    assert resp.status_code == 400
    assert resp.json()["error"] == "bad_request"
    assert client.get("/download-file", params={"fileName": "report.pdf", "receiver": "bob"}).json()[
        "chunks"
    ] == []


def test_blank_download_parameters_are_rejected(client):
    assert client.get(
        "/download-file", params={"fileName": "   ", "receiver": "bob"}
    ).status_code == 400
    assert client.get(
        "/download-file", params={"fileName": "report.pdf", "receiver": " "}
    ).status_code == 400


def test_download_parameters_are_trimmed(client):
    _chunk(client, 0, "YQ==", seq=0, total=1)

    resp = client.get("/download-file", params={"fileName": " report.pdf ", "receiver": " bob "})

    assert resp.json() == {"fileName": "report.pdf", "chunks": ["YQ=="]}
