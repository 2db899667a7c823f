"""imagen - AI image generation CLI for Gemini and OpenAI.

Cassette record/replay lives in imagen.cassette; the CLI in imagen.cli.
"""

__version__ = "0.1.0"
