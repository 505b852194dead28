import json

import httpx

import validate_mirrors


def _handler(request):
    if request.url.host == "good.example":
        return httpx.Response(200, json={"version": "2.0"})
    if request.url.host == "html.example":
        return httpx.Response(200, text="<html></html>")
    if request.url.host == "down.example":
        raise httpx.ConnectError("refused", request=request)
    return httpx.Response(500)


def test_missing_candidates_file_is_created_with_defaults(tmp_path):
    path = tmp_path / "data" / "candidates.txt"

    candidates = validate_mirrors.read_candidates(str(path))

    assert path.exists()
    assert candidates == list(validate_mirrors.DEFAULT_CANDIDATES)


def test_candidates_are_trimmed_and_blank_lines_skipped(tmp_path):
    path = tmp_path / "candidates.txt"
    path.write_text("https://good.example/\n\n  https://bad.example  \n", encoding="utf-8")

    assert validate_mirrors.read_candidates(str(path)) == [
        "https://good.example", "https://bad.example"]


def test_only_json_200_mirrors_are_valid(capsys):
    candidates = ["https://good.example", "https://html.example",
                  "https://down.example", "https://bad.example"]

    valid = validate_mirrors.validate(candidates, 1.0, transport=httpx.MockTransport(_handler))

    assert set(valid) == set(validate_mirrors.CATEGORIES)
    for mirrors in valid.values():
        assert mirrors == ["https://good.example"]
    out = capsys.readouterr().out
    assert "Checking https://down.example..." in out
    assert "ERROR" in out


def test_main_writes_valid_file(tmp_path, monkeypatch):
    candidates = tmp_path / "candidates.txt"
    candidates.write_text("https://good.example\nhttps://bad.example\n", encoding="utf-8")
    output = tmp_path / "out" / "valid.json"
    real_validate = validate_mirrors.validate
    monkeypatch.setattr(
        validate_mirrors, "validate",
        lambda urls, timeout: real_validate(urls, timeout, transport=httpx.MockTransport(_handler)))

    code = validate_mirrors.main(["--candidates", str(candidates), "--output", str(output)])

    assert code == 0
    saved = json.loads(output.read_text(encoding="utf-8"))
    assert saved["search"] == ["https://good.example"]
    assert saved["comments"] == ["https://good.example"]
