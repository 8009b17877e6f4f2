"""
Reply envelopes.

A message travelling through the broker is a list of frames:

    [address, b'', address, b'', ..., payload, ...]

Each hop pushes its return address plus an empty delimiter on the front and
pops it again on the way back, so the envelope is a stack of addresses.
"""
from .constants import DELIMITER
from .errors import MalformedEnvelope


class Envelope(object):
    """Ordered list of opaque frames with push/pop-from-front semantics."""

    def __init__(self, frames=()):
        self.frames = list(frames)

    def push(self, address):
        return wrap_address(address, self)

    def pop(self):
        return strip_address(self)

    def __iter__(self):
        return iter(self.frames)

    def __len__(self):
        return len(self.frames)

    def __getitem__(self, index):
        return self.frames[index]

    def __eq__(self, other):
        if isinstance(other, Envelope):
            return self.frames == other.frames
        if isinstance(other, (list, tuple)):
            return self.frames == list(other)
        return NotImplemented

    __hash__ = None

    def __repr__(self):
        return "Envelope(%r)" % (self.frames,)


def strip_address(envelope):
    """Split off the outermost address.

    Returns ``(address, rest)`` where ``rest`` is everything after the
    delimiter. Raises MalformedEnvelope unless the envelope starts with a
    non-empty address, a delimiter and at least one more frame.
    """
    frames = list(envelope)
    if len(frames) < 3:
        raise MalformedEnvelope("expected address, delimiter and body, got %d frame(s)" % len(frames), frames)
    address, empty = frames[:2]
    if address == DELIMITER:
        raise MalformedEnvelope("missing address frame", frames)
    if empty != DELIMITER:
        raise MalformedEnvelope("missing delimiter after address %r" % (address,), frames)
    return address, Envelope(frames[2:])


def wrap_address(address, rest):
    """Inverse of strip_address: prepend ``address`` and a delimiter."""
    if not address:
        raise MalformedEnvelope("address frame must not be empty")
    return Envelope([address, DELIMITER] + list(rest))


def check_body(frames):
    """Validate payload frames before they are wrapped and sent.

    The body must be a non-empty list of bytes frames, none of them the
    empty delimiter. Returns the frames as a list.
    """
    if not isinstance(frames, (list, tuple, Envelope)):
        raise MalformedEnvelope("body must be a list of frames, got %r" % (frames,))
    frames = list(frames)
    if not frames:
        raise MalformedEnvelope("body must have at least one frame", frames)
    for frame in frames:
        if not isinstance(frame, bytes):
            raise MalformedEnvelope("body frame %r is not bytes" % (frame,), frames)
        if frame == DELIMITER:
            raise MalformedEnvelope("body frame must not be empty", frames)
    return frames
