"""Byte-exact codec for Standard MIDI File track events."""

from .channel import (  # noqa: F401
    ChannelMessage,
    ChannelModeMessage,
    ChannelPressure,
    ControlChange,
    Mode,
    NoteOff,
    NoteOn,
    PitchBendChange,
    PolyphonicKeyPressure,
    ProgramChange,
    read_channel_message,
)
from .container import HeaderChunk, MidiFile  # noqa: F401
from .errors import (  # noqa: F401
    CodecError,
    InvalidChunk,
    InvalidDataByte,
    InvalidMetaLength,
    InvalidModeMessage,
    InvalidStatusByte,
    InvalidTextEncoding,
    MalformedLength,
    MissingEndOfTrack,
    MissingRunningStatus,
    TruncatedChannelMessage,
    TruncatedChunk,
    TruncatedData,
    TruncatedMeta,
    TruncatedSysEx,
    TruncatedSystemMessage,
)
from .events import MTrkEvent, encode_event, read_event  # noqa: F401
from .meta import (  # noqa: F401
    CopyrightNotice,
    CuePoint,
    EndOfTrack,
    InstrumentName,
    KeySignature,
    Lyric,
    Marker,
    MetaEvent,
    MidiChannelPrefix,
    SequenceNumber,
    SequencerSpecific,
    SetTempo,
    SmpteOffset,
    Text,
    TimeSignature,
    TrackName,
    UnknownMetaEvent,
    read_meta,
)
from .sysex import SysExEvent, Terminator, read_sysex  # noqa: F401
from .system import (  # noqa: F401
    ActiveSensing,
    Continue,
    EndOfExclusive,
    SongPositionPointer,
    SongSelect,
    Start,
    Stop,
    SystemMessage,
    SystemReset,
    TimingClock,
    TuneRequest,
    read_system_message,
)
from .track import (  # noqa: F401
    TrackEvents,
    decode_track,
    decode_track_bytes,
    encode_track,
    encode_track_events,
)
from .varlen import encode_varlen, read_data_byte, read_varlen  # noqa: F401
