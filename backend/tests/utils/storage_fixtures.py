from __future__ import annotations

from io import BytesIO

from PIL import Image, ImageDraw


def dummy_png_bytes(*, label: str = "Week proof") -> bytes:
    """
    Produce a small but well-formed PNG that survives Pillow decoding.

    A few bands and a caption mimic a screenshot of a completed module.
    """
    img = Image.new("RGB", (160, 120), color=(245, 245, 245))
    draw = ImageDraw.Draw(img)
    for idx in range(0, img.height, 20):
        shade = 200 if (idx // 20) % 2 == 0 else 230
        draw.rectangle([(0, idx), (img.width, idx + 10)], fill=(shade, shade, shade))
    draw.text((10, 10), label, fill=(30, 30, 30))
    buf = BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
