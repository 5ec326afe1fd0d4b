import io

import numpy as np
from PIL import Image


def make_png_bytes(w=4, h=4, color=(128, 64, 32)) -> bytes:
    arr = np.zeros((h, w, 3), dtype=np.uint8)
    arr[:, :] = color
    img = Image.fromarray(arr)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def start_session(client, w=8, h=6) -> dict:
    files = {"file": ("sample.png", make_png_bytes(w, h), "image/png")}
    r = client.post("/sessions", files=files)
    assert r.status_code == 201, r.text
    return r.json()["session"]


def apply(client, session_id, operation, params):
    return client.post(
        f"/sessions/{session_id}/operations",
        json={"operation": operation, "params": params},
    )


def test_root_and_health(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["service"] == "imgedit-backend"

    r2 = client.get("/health")
    assert r2.status_code == 200
    assert r2.json()["status"] == "healthy"


def test_start_session(client):
    session = start_session(client)
    assert (session["width"], session["height"], session["channels"]) == (8, 6, 3)
    assert session["current_label"] == "Original"
    assert session["undo_history"] == ["Original"]
    assert session["can_redo"] is False
    assert session["original_filename"] == "sample.png"

    r = client.get(f"/sessions/{session['id']}")
    assert r.status_code == 200
    assert r.json()["id"] == session["id"]


def test_invalid_upload(client):
    files = {"file": ("notes.txt", b"not an image", "text/plain")}
    r = client.post("/sessions", files=files)
    assert r.status_code == 400


def test_apply_undo_redo(client):
    sid = start_session(client)["id"]

    r = apply(client, sid, "rotate", {"angle": "90"})
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["operation"] == "rotate"
    assert data["operation_name"] == "Rotate 90° clockwise"
    assert (data["width"], data["height"]) == (6, 8)
    assert data["session"]["can_undo"] is True

    r2 = client.post(f"/sessions/{sid}/undo")
    assert r2.status_code == 200
    assert r2.json()["changed"] is True
    assert r2.json()["session"]["width"] == 8
    assert r2.json()["session"]["can_redo"] is True

    r3 = client.post(f"/sessions/{sid}/redo")
    assert r3.status_code == 200
    assert r3.json()["session"]["width"] == 6

    r4 = client.post(f"/sessions/{sid}/redo")
    assert r4.status_code == 200
    assert r4.json()["changed"] is False


def test_batch_is_one_step(client):
    sid = start_session(client)["id"]
    ops = [
        {"operation": "crop", "params": {"x": 0, "y": 0, "width": 4, "height": 4}},
        {"operation": "blur", "params": {"intensity": "light"}},
        {"operation": "brightness", "params": {"brightness": -0.2}},
    ]
    r = apply(client, sid, "batch", {"operations": ops})
    assert r.status_code == 200, r.text
    session = r.json()["session"]
    assert session["current_label"].startswith("Batch [3 operations]")
    assert len(session["undo_history"]) == 2


def test_download_image(client):
    sid = start_session(client)["id"]
    apply(client, sid, "crop", {"x": 1, "y": 1, "width": 3, "height": 2})

    r = client.get(f"/sessions/{sid}/image")
    assert r.status_code == 200
    assert r.headers["content-type"] == "image/png"
    img = Image.open(io.BytesIO(r.content))
    assert img.size == (3, 2)
    # the uploaded color survives the decode/encode round trip
    assert img.convert("RGB").getpixel((0, 0)) == (128, 64, 32)

    r2 = client.get(f"/sessions/{sid}/image", params={"format": "jpeg"})
    assert r2.status_code == 200
    assert r2.headers["content-type"] == "image/jpeg"


def test_missing_parameter_is_400(client):
    sid = start_session(client)["id"]
    r = apply(client, sid, "brightness", {"factor": 1.2})
    assert r.status_code == 400
    body = r.json()
    assert body["kind"] == "invalid_parameters"
    assert body["operation"] == "brightness"
    assert body["parameter"] == "brightness"


def test_unknown_operation_is_400(client):
    sid = start_session(client)["id"]
    r = apply(client, sid, "sharpen", {})
    assert r.status_code == 400


def test_failed_operation_is_rolled_back(client):
    session = start_session(client)
    sid = session["id"]
    r = apply(client, sid, "crop", {"x": 0, "y": 0, "width": 100, "height": 100})
    assert r.status_code == 422
    assert r.json()["operation"] == "crop"

    after = client.get(f"/sessions/{sid}").json()
    assert after["width"] == session["width"]
    assert after["undo_history"] == session["undo_history"]


def test_unsupported_operation_is_501(client):
    sid = start_session(client)["id"]
    r = apply(client, sid, "background_removal", {})
    assert r.status_code == 501
    assert r.json()["kind"] == "operation_not_supported"


def test_unknown_session_is_404(client):
    assert client.get("/sessions/does-not-exist").status_code == 404
    assert apply(client, "does-not-exist", "rotate", {"angle": "90"}).status_code == 404
    assert client.post("/sessions/does-not-exist/undo").status_code == 404


def test_end_session(client):
    sid = start_session(client)["id"]
    r = client.delete(f"/sessions/{sid}")
    assert r.status_code == 200
    assert r.json()["ok"] is True
    assert client.get(f"/sessions/{sid}").status_code == 404
    assert client.delete(f"/sessions/{sid}").status_code == 404


def test_huge_brightness_is_not_a_server_error(client):
    sid = start_session(client)["id"]
    r = apply(client, sid, "brightness", {"brightness": 1e307})
    assert r.status_code == 200, r.text
    assert r.json()["operation_name"].startswith("Brightness +")

    img = Image.open(io.BytesIO(client.get(f"/sessions/{sid}/image").content))
    assert img.convert("RGB").getpixel((0, 0)) == (255, 255, 255)


def test_out_of_range_number_is_400(client):
    session = start_session(client)
    r = apply(client, session["id"], "contrast", {"contrast": 10**400})
    assert r.status_code == 400
    assert r.json()["parameter"] == "contrast"

    after = client.get(f"/sessions/{session['id']}").json()
    assert after["undo_history"] == session["undo_history"]


def test_operation_name_matches_the_request(client):
    sid = start_session(client)["id"]
    r = apply(client, sid, "saturation", {"saturation": 1.5})
    assert r.status_code == 200, r.text
    assert r.json()["operation_name"] == "Saturation +50%"


def test_flip_mirror_and_grayscale(client):
    sid = start_session(client)["id"]
    assert apply(client, sid, "flip", {"direction": "vertical"}).status_code == 200
    assert apply(client, sid, "mirror", {"side": "left"}).status_code == 200

    r = apply(client, sid, "grayscale", {})
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["operation_name"] == "Grayscale [luminosity]"
    assert data["session"]["channels"] == 1

    r2 = client.get(f"/sessions/{sid}/image")
    assert Image.open(io.BytesIO(r2.content)).mode == "L"

    assert apply(client, sid, "flip", {"direction": "sideways"}).status_code == 400
