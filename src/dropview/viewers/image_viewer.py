"""Image viewer — half-block rendering with zoom, pan and rotate."""

from __future__ import annotations

import io

from PIL import Image, UnidentifiedImageError
from rich.color import Color
from rich.style import Style
from rich.text import Text
from textual.binding import Binding
from textual.reactive import reactive

from dropview.dispatch.descriptor import FileRef
from dropview.dispatch.errors import DecodeError
from dropview.viewers.base import ExtensionViewer, ViewerWidget, read_bytes

HALF_BLOCK = "▀"
MIN_ZOOM = 0.25
MAX_ZOOM = 8.0
ZOOM_STEP = 1.25
PAN_STEP = 4


def fit_size(image_size: tuple[int, int], box: tuple[int, int], zoom: float = 1.0) -> tuple[int, int]:
    """Scale ``image_size`` to fit ``box`` keeping aspect, then apply ``zoom``."""
    iw, ih = image_size
    bw, bh = box
    if iw <= 0 or ih <= 0 or bw <= 0 or bh <= 0:
        return (0, 0)
    scale = min(bw / iw, bh / ih) * zoom
    return (max(1, round(iw * scale)), max(1, round(ih * scale)))


def half_block_text(image: Image.Image) -> Text:
    """Render an RGB image as text, two pixel rows per line."""
    width, height = image.size
    pixels = image.load()
    text = Text(no_wrap=True, overflow="crop")
    for y in range(0, height, 2):
        if y:
            text.append("\n")
        for x in range(width):
            top = Color.from_rgb(*pixels[x, y][:3])
            bottom = Color.from_rgb(*pixels[x, y + 1][:3]) if y + 1 < height else None
            text.append(HALF_BLOCK, Style(color=top, bgcolor=bottom))
    return text


class ImageView(ViewerWidget, can_focus=True):
    """Draws an image scaled to the widget."""

    BINDINGS = [
        Binding("plus,equals_sign", "zoom_in", "Zoom in"),
        Binding("minus", "zoom_out", "Zoom out"),
        Binding("0", "reset", "Reset"),
        Binding("r", "rotate", "Rotate"),
        Binding("left", "pan(-1, 0)", "Pan", show=False),
        Binding("right", "pan(1, 0)", "Pan", show=False),
        Binding("up", "pan(0, -1)", "Pan", show=False),
        Binding("down", "pan(0, 1)", "Pan", show=False),
    ]

    zoom = reactive(1.0)
    rotation = reactive(0)
    offset_x = reactive(0)
    offset_y = reactive(0)

    def __init__(self, image: Image.Image, **kwargs) -> None:
        super().__init__(**kwargs)
        self.image = image

    def on_mount(self) -> None:
        self.focus()

    def frame(self, width: int, height: int) -> Image.Image | None:
        """The part of the transformed image visible in ``width`` x ``height`` cells."""
        image = self.image
        if self.rotation:
            image = image.rotate(-90 * self.rotation, expand=True)
        box = (width, height * 2)
        size = fit_size(image.size, box, self.zoom)
        if size == (0, 0):
            return None
        image = image.resize(size)
        # Crop to the box when zoomed past it, honouring the pan offset.
        max_x = max(0, size[0] - box[0])
        max_y = max(0, size[1] - box[1])
        left = min(max(0, max_x // 2 + self.offset_x), max_x)
        top = min(max(0, max_y // 2 + self.offset_y), max_y)
        return image.crop((left, top, left + min(size[0], box[0]), top + min(size[1], box[1])))

    def render(self) -> Text:
        frame = self.frame(self.size.width, self.size.height)
        if frame is None:
            return Text()
        return half_block_text(frame)

    def action_zoom_in(self) -> None:
        self.zoom = min(MAX_ZOOM, self.zoom * ZOOM_STEP)

    def action_zoom_out(self) -> None:
        self.zoom = max(MIN_ZOOM, self.zoom / ZOOM_STEP)

    def action_reset(self) -> None:
        self.zoom = 1.0
        self.rotation = 0
        self.offset_x = 0
        self.offset_y = 0

    def action_rotate(self) -> None:
        self.rotation = (self.rotation + 1) % 4

    def action_pan(self, dx: int, dy: int) -> None:
        self.offset_x += dx * PAN_STEP
        self.offset_y += dy * PAN_STEP * 2


class ImageViewer(ExtensionViewer):
    """Displays raster images."""

    name = "image"
    extensions = frozenset({".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp"})

    def load(self, target: FileRef) -> Image.Image:
        raw = read_bytes(target)
        try:
            with Image.open(io.BytesIO(raw)) as img:
                return img.convert("RGB")
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise DecodeError(target.name, f"cannot decode image: {e}") from e

    def build(self, target: FileRef, content: Image.Image) -> ImageView:
        return ImageView(content, classes="viewer image-viewer")

    async def release(self) -> None:
        if self.content is not None:
            self.content.close()
