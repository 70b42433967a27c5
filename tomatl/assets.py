from __future__ import annotations

import io
import math
import struct
import wave

SAMPLE_RATE = 44_100
AMPLITUDE = 16000

# (frequency Hz, duration s); 0 Hz is silence
CHIME_PATTERN: tuple[tuple[float, float], ...] = (
    (659.0, 0.15),
    (0.0, 0.05),
    (880.0, 0.20),
    (0.0, 0.05),
    (1046.0, 0.30),
)


def render_tones(pattern: tuple[tuple[float, float], ...], *, sample_rate: int = SAMPLE_RATE) -> bytes:
    """Render a mono 16-bit WAV file for the given tone pattern."""
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wav_file:
        wav_file.setnchannels(1)
        wav_file.setsampwidth(2)
        wav_file.setframerate(sample_rate)
        for freq, dur in pattern:
            frames = int(sample_rate * dur)
            if freq <= 0:
                wav_file.writeframesraw(b"\x00\x00" * frames)
                continue
            samples = (
                int(AMPLITUDE * math.sin(2.0 * math.pi * freq * (i / sample_rate)))
                for i in range(frames)
            )
            wav_file.writeframesraw(b"".join(struct.pack("<h", s) for s in samples))
    return buf.getvalue()


COMPLETION_CHIME: bytes = render_tones(CHIME_PATTERN)
