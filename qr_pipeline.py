import base64
import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Dict, Optional, Protocol, Tuple

from PIL import Image
import qrcode
from qrcode.util import MODE_8BIT_BYTE, QRData
import segno

from errors import GenerationFailed
from validation import ValidatedRequest

logger = logging.getLogger(__name__)

ERROR_CORRECTION = "M"
QUIET_ZONE = 2
DATA_URL_PREFIX = "data:image/png;base64,"

# 1-bit pixel values
DARK = 0
LIGHT = 255


@dataclass(frozen=True)
class QrSymbol:
    """The logical QR matrix, without quiet zone. True marks a dark module."""

    modules: Tuple[Tuple[bool, ...], ...]
    version: int
    error_correction: str

    @property
    def size(self) -> int:
        return len(self.modules)


@dataclass(frozen=True)
class RenderedImage:
    png: bytes
    width: int
    height: int

    def to_data_url(self) -> str:
        return DATA_URL_PREFIX + base64.b64encode(self.png).decode("ascii")


class QrEncoder(Protocol):
    def encode(self, text: str, error_correction: str) -> QrSymbol:
        ...


class QrcodeEncoder:
    """Encodes text as a single byte-mode segment with the qrcode library."""

    _LEVELS: Dict[str, int] = {
        "L": qrcode.constants.ERROR_CORRECT_L,
        "M": qrcode.constants.ERROR_CORRECT_M,
        "Q": qrcode.constants.ERROR_CORRECT_Q,
        "H": qrcode.constants.ERROR_CORRECT_H,
    }

    def encode(self, text: str, error_correction: str) -> QrSymbol:
        qr = qrcode.QRCode(
            version=None,
            error_correction=self._LEVELS[error_correction],
            border=0,
        )
        qr.add_data(QRData(text.encode("utf-8"), mode=MODE_8BIT_BYTE))
        qr.make(fit=True)
        modules = tuple(tuple(bool(cell) for cell in row) for row in qr.get_matrix())
        return QrSymbol(modules=modules, version=qr.version, error_correction=error_correction)


class SegnoEncoder:
    """Encodes text as a byte-mode segment with segno."""

    def encode(self, text: str, error_correction: str) -> QrSymbol:
        qr = segno.make_qr(text, error=error_correction.lower(), mode="byte", boost_error=False)
        modules = tuple(tuple(bool(cell) for cell in row) for row in qr.matrix)
        return QrSymbol(modules=modules, version=qr.version, error_correction=qr.error)


ENCODERS = {
    "qrcode": QrcodeEncoder,
    "segno": SegnoEncoder,
}


def get_encoder(name: str) -> QrEncoder:
    try:
        return ENCODERS[name.strip().lower()]()
    except KeyError:
        raise ValueError(
            f"Unknown QR encoder {name!r}, expected one of: {', '.join(sorted(ENCODERS))}"
        ) from None


def rasterize(symbol: QrSymbol, pixel_size: int, margin: int = QUIET_ZONE) -> Image.Image:
    """
    Draw the symbol with a light quiet zone of `margin` modules and scale it
    to exactly pixel_size x pixel_size.
    Scaling uses nearest-neighbour sampling, so every output pixel takes the
    colour of the module it falls in and module edges stay sharp.
    """
    dimension = symbol.size + 2 * margin
    if pixel_size < dimension:
        logger.warning(
            "Requested %spx for a %s-module symbol; modules are narrower than one pixel",
            pixel_size,
            dimension,
        )
    canvas = Image.new("1", (dimension, dimension), LIGHT)
    pixels = canvas.load()
    for y, row in enumerate(symbol.modules):
        for x, dark in enumerate(row):
            if dark:
                pixels[x + margin, y + margin] = DARK
    return canvas.resize((pixel_size, pixel_size), Image.Resampling.NEAREST)


def encode_png(image: Image.Image) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def generate(validated: ValidatedRequest, encoder: Optional[QrEncoder] = None) -> RenderedImage:
    """Encode the validated link and render it as a square PNG."""
    encoder = encoder or QrcodeEncoder()
    try:
        symbol = encoder.encode(validated.text, ERROR_CORRECTION)
        image = rasterize(symbol, validated.pixel_size)
        png = encode_png(image)
    except Exception as exc:
        logger.exception("QR generation failed for %d characters of input", len(validated.text))
        raise GenerationFailed() from exc
    logger.debug(
        "Generated version %s QR code at %spx for %s",
        symbol.version,
        validated.pixel_size,
        validated.text,
    )
    return RenderedImage(png=png, width=image.width, height=image.height)
