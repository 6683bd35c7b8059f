from __future__ import annotations

import base64
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Optional

from PIL import Image, ImageOps

from agents.llm_client import LLMClient
from schemas.common import ImageResolution
from schemas.media import GeneratedImage

# Output size per resolution tier. YouTube's recommended thumbnail is 1280x720.
THUMBNAIL_SIZES = {
    ImageResolution.r1k: (1280, 720),
    ImageResolution.r2k: (1920, 1080),
    ImageResolution.r4k: (3840, 2160),
}


@dataclass(frozen=True)
class ThumbnailFiles:
    thumbnail_path: Path
    source_path: Path
    width: int
    height: int


def _ensure_parent(p: Path) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)


def _cover_resize(im: Image.Image, width: int, height: int) -> Image.Image:
    return ImageOps.fit(im, (int(width), int(height)), method=Image.Resampling.LANCZOS, centering=(0.5, 0.5))


def build_thumbnail_prompt(base_prompt: str, *, overlay_text: Optional[str] = None) -> str:
    """Wrap an art-direction prompt with the constraints every thumbnail needs."""
    parts = [
        (base_prompt or "").strip(),
        "YouTube thumbnail. Aspect ratio 16:9. High contrast, readable at small sizes.",
        "No logos, no watermarks.",
    ]
    if overlay_text and overlay_text.strip():
        parts.append(f'Render the headline text "{overlay_text.strip()}" in bold, large lettering.')
    else:
        parts.append("No text.")
    return "\n".join(p for p in parts if p).strip()


def save_thumbnail(
    image: GeneratedImage,
    *,
    out_dir: Path,
    stem: str,
    resolution: ImageResolution | str = ImageResolution.r1k,
    quality: int = 90,
) -> ThumbnailFiles:
    """Write the raw image plus a 16:9 JPEG crop sized for the tier."""
    width, height = THUMBNAIL_SIZES[ImageResolution(resolution)]
    ext = image.mime_type.split("/")[-1] or "png"

    source_path = out_dir / f"{stem}_source.{ext}"
    thumb_path = out_dir / f"{stem}.jpg"
    _ensure_parent(source_path)

    raw = image.to_bytes()
    source_path.write_bytes(raw)

    with Image.open(BytesIO(raw)) as im:
        im = im.convert("RGB")
        thumb = _cover_resize(im, width, height)
        thumb.save(str(thumb_path), format="JPEG", quality=int(quality), optimize=True)

    return ThumbnailFiles(thumbnail_path=thumb_path, source_path=source_path, width=width, height=height)


async def generate_thumbnails(
    *,
    llm: LLMClient,
    prompt: str,
    out_dir: Path,
    stem: str = "thumbnail",
    resolution: ImageResolution | str = ImageResolution.r1k,
    overlay_text: Optional[str] = None,
) -> list[ThumbnailFiles]:
    """Generate thumbnail images for a prompt and save them under out_dir.

    Returns an empty list when the backend produced no image data.
    Backend failures propagate (NetworkFailure / BackendError / TimeoutFailure).
    """
    if not (prompt or "").strip():
        raise ValueError("prompt must not be empty")

    images = await llm.generate_images(
        prompt=build_thumbnail_prompt(prompt, overlay_text=overlay_text),
        aspect_ratio="16:9",
        resolution=resolution,
    )

    out: list[ThumbnailFiles] = []
    for i, image in enumerate(images):
        name = stem if len(images) == 1 else f"{stem}_{i + 1}"
        out.append(save_thumbnail(image, out_dir=out_dir, stem=name, resolution=resolution))
    return out


def image_from_bytes(data: bytes, mime_type: str = "image/png") -> GeneratedImage:
    return GeneratedImage(mime_type=mime_type, data_b64=base64.b64encode(data).decode("ascii"))
