"""Protocol layer: SLIP markers, encoder, decoder, and framing helpers."""

from .markers import END, ESC, ESC_END, ESC_ESC
from .errors import SlipError, CapacityExceeded, InvalidEscapeSequence
from .encoder import Encoder, EncodeTotals, encode, encoded_size, max_encoded_size
from .decoder import Decoder, DecodeResult, DecodeStatus, DecoderState
from .framing import FrameReader, build_frame, parse_frames
