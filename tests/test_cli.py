"""End-to-end CLI tests driven by cassettes and IMAGEN_* env vars."""

from __future__ import annotations

import io
from pathlib import Path

import pytest
import yaml
from PIL import Image

from imagen.cassette import CassetteRecorder, read_cassette
from imagen.cli import build_parser, build_request, main
from imagen.clients.gemini import GeminiGenerator
from imagen.config import Config
from imagen.errors import ApiError, CassetteFixtureError, InvalidArgumentError, NetworkError
from imagen.ports.image_generator import GeneratedImage, ImageResponse


def _png_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), color=(0, 128, 255)).save(buf, format="PNG")
    return buf.getvalue()


def _ok(*images: bytes, mime: str = "image/png") -> dict:
    response = ImageResponse(images=[GeneratedImage(data=d, mime_type=mime) for d in images])
    return {"Ok": response.model_dump(mode="json")}


def _write_cassette(path: Path, *outputs) -> Path:
    recorder = CassetteRecorder(path, "cli-test")
    for output in outputs:
        recorder.record("image_generator", "generate", {}, output)
    return recorder.finish()


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    for var in ("GEMINI_API_KEY", "OPENAI_API_KEY", "IMAGEN_REPLAY", "IMAGEN_REC", "IMAGEN_CASSETTE_DIR"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("IMAGEN_CONFIG", str(tmp_path / "no-config.yaml"))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def replay(monkeypatch, tmp_path):
    def _replay(*outputs) -> Path:
        path = _write_cassette(tmp_path / "fixture.cassette.yaml", *outputs)
        monkeypatch.setenv("IMAGEN_REPLAY", str(path))
        return path

    return _replay


# ── Replay ───────────────────────────────────────────────────────────


class TestReplayRuns:
    def test_saves_replayed_image(self, replay, tmp_path, capsys):
        png = _png_bytes()
        replay(_ok(png))

        main(["-f", "png", "-o", "cat.png", "a cat"])

        assert (tmp_path / "cat.png").read_bytes() == png
        assert "Saved: cat.png" in capsys.readouterr().err

    def test_converts_and_auto_names(self, replay, tmp_path):
        replay(_ok(_png_bytes()))

        main(["a cat on a mat"])

        [saved] = list(tmp_path.glob("a-cat-on-a-mat-*.jpg"))
        assert Image.open(saved).format == "JPEG"

    def test_multiple_images_numbered(self, replay, tmp_path):
        png = _png_bytes()
        replay(_ok(png, png))

        main(["-f", "png", "-n", "2", "-o", "out/cat.png", "a cat"])

        assert (tmp_path / "out" / "cat-1.png").exists()
        assert (tmp_path / "out" / "cat-2.png").exists()

    def test_replayed_error_exits_1(self, replay, capsys):
        replay({"Err": "API error (500): boom"})

        with pytest.raises(SystemExit) as exc_info:
            main(["a cat"])

        assert exc_info.value.code == 1
        assert "Error: API error (500): boom" in capsys.readouterr().err

    def test_exhausted_cassette_is_fatal(self, replay):
        replay()  # no interactions at all

        with pytest.raises(CassetteFixtureError, match="Cassette exhausted"):
            main(["a cat"])

    def test_missing_cassette_exits_1(self, monkeypatch, tmp_path, capsys):
        monkeypatch.setenv("IMAGEN_REPLAY", str(tmp_path / "missing.yaml"))

        with pytest.raises(SystemExit) as exc_info:
            main(["a cat"])

        assert exc_info.value.code == 1
        assert "Failed to load cassette" in capsys.readouterr().err

    def test_prompt_file(self, replay, tmp_path):
        replay(_ok(_png_bytes()))
        (tmp_path / "prompt.txt").write_text("a prompt from a file")

        main(["-p", "prompt.txt", "-f", "png"])

        assert list(tmp_path.glob("a-prompt-from-a-file-*.png"))


# ── Recording ────────────────────────────────────────────────────────


class TestRecordRuns:
    @pytest.fixture
    def recording(self, monkeypatch, tmp_path):
        monkeypatch.setenv("IMAGEN_REC", "1")
        monkeypatch.setenv("IMAGEN_CASSETTE_DIR", str(tmp_path / "cassettes"))
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        return tmp_path / "cassettes"

    def test_success_recorded_then_replayed(self, recording, monkeypatch, tmp_path, capsys):
        png = _png_bytes()

        async def fake_generate(self, request):
            return ImageResponse(images=[GeneratedImage(data=png, mime_type="image/png")])

        monkeypatch.setattr(GeminiGenerator, "generate", fake_generate)
        main(["-f", "png", "-o", "live.png", "a cat"])

        [cassette_path] = list(recording.glob("*/image_generator.cassette.yaml"))
        assert "Cassette saved:" in capsys.readouterr().err
        [interaction] = read_cassette(cassette_path).interactions
        assert interaction.input["prompt"] == "a cat"
        assert "Ok" in interaction.output

        # Replay the fresh recording with no key and no network
        monkeypatch.delenv("IMAGEN_REC")
        monkeypatch.delenv("GEMINI_API_KEY")
        monkeypatch.setenv("IMAGEN_REPLAY", str(cassette_path))
        main(["-f", "png", "-o", "replayed.png", "a cat"])
        assert (tmp_path / "replayed.png").read_bytes() == (tmp_path / "live.png").read_bytes()

    def test_failure_still_written(self, recording, monkeypatch, capsys):
        async def failing_generate(self, request):
            raise ApiError(400, "bad prompt", provider="gemini")

        monkeypatch.setattr(GeminiGenerator, "generate", failing_generate)

        with pytest.raises(SystemExit) as exc_info:
            main(["a cat"])

        assert exc_info.value.code == 1
        [cassette_path] = list(recording.glob("*/image_generator.cassette.yaml"))
        doc = yaml.safe_load(cassette_path.read_text())
        assert doc["interactions"][0]["output"] == {"Err": "API error (400): bad prompt"}
        assert "Error: API error (400): bad prompt" in capsys.readouterr().err

    def test_recording_saved_when_close_fails(self, recording, monkeypatch, capsys):
        png = _png_bytes()

        async def fake_generate(self, request):
            return ImageResponse(images=[GeneratedImage(data=png, mime_type="image/png")])

        async def failing_close(self):
            raise NetworkError("connection reset on close", provider="gemini")

        monkeypatch.setattr(GeminiGenerator, "generate", fake_generate)
        monkeypatch.setattr(GeminiGenerator, "close", failing_close)

        with pytest.raises(SystemExit) as exc_info:
            main(["-f", "png", "a cat"])

        assert exc_info.value.code == 1
        [cassette_path] = list(recording.glob("*/image_generator.cassette.yaml"))
        [interaction] = read_cassette(cassette_path).interactions
        assert "Ok" in interaction.output
        err = capsys.readouterr().err
        assert "Cassette saved:" in err
        assert "connection reset on close" in err


# ── Argument handling ────────────────────────────────────────────────


class TestArguments:
    def _run_expecting_error(self, argv, capsys) -> str:
        with pytest.raises(SystemExit) as exc_info:
            main(argv)
        assert exc_info.value.code == 1
        return capsys.readouterr().err

    def test_missing_prompt(self, capsys):
        err = self._run_expecting_error([], capsys)
        assert "Provide a prompt string or use -p/--prompt-file" in err

    def test_bad_aspect_ratio(self, capsys):
        err = self._run_expecting_error(["-a", "7:3", "a cat"], capsys)
        assert "Error: Invalid argument: Unsupported aspect ratio '7:3' for Gemini" in err

    def test_thinking_rejected_for_openai(self, capsys):
        err = self._run_expecting_error(["-m", "gpt-1", "-t", "high", "a cat"], capsys)
        assert "--thinking is only supported for Gemini models" in err

    def test_unknown_model(self, capsys):
        err = self._run_expecting_error(["-m", "dall-e-3", "a cat"], capsys)
        assert "Unknown provider for model 'dall-e-3'" in err

    def test_missing_key_in_live_mode(self, capsys):
        err = self._run_expecting_error(["a cat"], capsys)
        assert "No API key for Gemini. Set GEMINI_API_KEY" in err

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert "imagen" in capsys.readouterr().out

    def test_prompt_and_prompt_file_conflict(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["-p", "prompt.txt", "a cat"])
        assert exc_info.value.code == 2


class TestBuildRequest:
    def test_defaults_from_config(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("defaults:\n  model: gpt-1\n  format: png\n  quality: high\n")
        args = build_parser().parse_args(["a cat"])

        request, provider = build_request(args, Config.load(config_path))

        assert provider.value == "openai"
        assert request.model == "gpt-image-1"
        assert request.format == "png"
        assert request.quality == "high"
        assert request.aspect_ratio == "1:1"

    def test_flags_override_config(self):
        args = build_parser().parse_args(["-m", "nano-banana-pro", "-a", "16:9", "-s", "2K", "-t", "low", "a cat"])

        request, provider = build_request(args, Config())

        assert request.model == "gemini-3-pro-image-preview"
        assert (request.aspect_ratio, request.size, request.thinking) == ("16:9", "2K", "low")

    def test_zero_count(self):
        args = build_parser().parse_args(["-n", "0", "a cat"])
        with pytest.raises(InvalidArgumentError, match="got 0"):
            build_request(args, Config())
