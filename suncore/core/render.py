"""
Offline Effects Rendering

Renders a source buffer through the nightcore effects chain:

    source -> eq -> +-> dry ---------------+-> mix -> envelope
                    +-> convolve -> wet ---+

Technical assumptions:
- The graph is rebuilt for every render and owns all intermediate arrays;
  nothing outlives a single render() call
- Output length is floor(frames / playback_rate) at the source sample rate
- Dry/wet levels are fixed at 0.7 / 0.3
- Rendering is all-or-nothing: errors and cancellation discard every
  intermediate result
"""

from dataclasses import dataclass, field
import logging
import math
import threading
import time
from typing import Callable, Optional, Sequence
import numpy as np

from .buffers import AudioBuffer
from .errors import InvalidParameters, RenderCancelled, SourceNotLoaded
from .impulse_response import ImpulseResponseSynthesizer
from .signal_processing import (
    DEFAULT_SHELF_FREQUENCY,
    apply_low_shelf,
    compute_peak,
    compute_rms,
    convolve_with_impulse,
    gain_envelope,
    playback_rate_resample,
    rendered_length,
)

logger = logging.getLogger(__name__)

DRY_MIX = 0.7
WET_MIX = 0.3


@dataclass(frozen=True)
class RenderParameters:
    """
    Settings for one render.

    Attributes:
        playback_rate: Read-rate multiplier, 0.5-2.0 in the UI
        volume_gain: Linear output gain, 0.0-1.0
        reverb_decay: Impulse envelope exponent, 0.01-10.0
        bass_boost_db: Low shelf gain, 0-12 dB
        dry_mix: Level of the unprocessed path (fixed)
        wet_mix: Level of the reverb path (fixed)
    """
    playback_rate: float = 1.0
    volume_gain: float = 1.0
    reverb_decay: float = 0.01
    bass_boost_db: float = 0.0
    dry_mix: float = field(default=DRY_MIX, init=False)
    wet_mix: float = field(default=WET_MIX, init=False)

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Check parameter ranges.

        Raises:
            InvalidParameters: Any value is out of range or not finite
        """
        values = {
            "playback_rate": self.playback_rate,
            "volume_gain": self.volume_gain,
            "reverb_decay": self.reverb_decay,
            "bass_boost_db": self.bass_boost_db,
        }
        for name, value in values.items():
            if not math.isfinite(value):
                raise InvalidParameters(f"{name} must be finite, got: {value}", details=values)

        if self.playback_rate <= 0:
            raise InvalidParameters(
                f"Playback rate must be positive, got: {self.playback_rate}", details=values
            )
        if self.volume_gain < 0:
            raise InvalidParameters(
                f"Volume gain must not be negative, got: {self.volume_gain}", details=values
            )
        if self.reverb_decay <= 0:
            raise InvalidParameters(
                f"Reverb decay must be positive, got: {self.reverb_decay}", details=values
            )
        if self.bass_boost_db < 0:
            raise InvalidParameters(
                f"Bass boost must not be negative, got: {self.bass_boost_db}", details=values
            )

    @classmethod
    def from_controls(
        cls,
        volume: int = 100,
        speed: float = 1.0,
        reverb_decay: float = 0.01,
        bass_boost: float = 0.0,
    ) -> "RenderParameters":
        """
        Map the user-facing controls to render parameters.

        Args:
            volume: Volume in percent (0-100)
            speed: Playback speed multiplier
            reverb_decay: Reverb decay exponent
            bass_boost: Bass boost in dB
        """
        return cls(
            playback_rate=speed,
            volume_gain=volume / 100,
            reverb_decay=reverb_decay,
            bass_boost_db=bass_boost,
        )


@dataclass
class Stage:
    """A node of the render graph."""
    name: str
    process: Callable[..., np.ndarray]
    inputs: tuple[str, ...] = ()


class RenderGraph:
    """
    Explicit directed acyclic graph of processing stages.

    Stages are added in dependency order; a stage may only consume stages
    added before it, so insertion order is a valid evaluation order.

    Usage:
        graph = RenderGraph()
        graph.add_stage("source", lambda: data)
        graph.add_stage("gain", lambda x: x * 0.5, inputs=("source",))
        out = graph.run()
    """

    def __init__(self, cancel_event: Optional[threading.Event] = None):
        self._stages: dict[str, Stage] = {}
        self.cancel_event = cancel_event

    def add_stage(
        self,
        name: str,
        process: Callable[..., np.ndarray],
        inputs: Sequence[str] = (),
    ) -> Stage:
        if name in self._stages:
            raise ValueError(f"Duplicate stage name: {name}")
        missing = [src for src in inputs if src not in self._stages]
        if missing:
            raise ValueError(f"Stage '{name}' depends on unknown stages: {missing}")

        stage = Stage(name=name, process=process, inputs=tuple(inputs))
        self._stages[name] = stage
        return stage

    @property
    def stage_names(self) -> list[str]:
        return list(self._stages)

    @property
    def edges(self) -> list[tuple[str, str]]:
        """(source, destination) pairs in evaluation order."""
        return [(src, stage.name) for stage in self._stages.values() for src in stage.inputs]

    def check_cancelled(self) -> None:
        """Raise RenderCancelled if cancellation was requested."""
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise RenderCancelled("Render cancelled")

    def run(self, until: Optional[str] = None) -> np.ndarray:
        """
        Evaluate the graph.

        Args:
            until: Stop after this stage and return its output
                (default: the last stage)

        Returns:
            Output array of the requested stage
        """
        if not self._stages:
            raise ValueError("Render graph has no stages")
        target = until if until is not None else next(reversed(self._stages))
        if target not in self._stages:
            raise ValueError(f"Unknown stage: {target}")

        outputs: dict[str, np.ndarray] = {}
        for stage in self._stages.values():
            self.check_cancelled()
            outputs[stage.name] = stage.process(*(outputs[src] for src in stage.inputs))
            if stage.name == target:
                break
        return outputs[target]


class EffectsRenderer:
    """
    Offline renderer for the nightcore effects chain.

    A renderer holds no state between renders beyond its configuration.
    Create one per call when running renders concurrently.
    """

    def __init__(
        self,
        synthesizer: Optional[ImpulseResponseSynthesizer] = None,
        cancel_event: Optional[threading.Event] = None,
        shelf_frequency: float = DEFAULT_SHELF_FREQUENCY,
    ):
        self.synthesizer = synthesizer
        self.cancel_event = cancel_event
        self.shelf_frequency = shelf_frequency

    def build_graph(
        self,
        source: AudioBuffer,
        params: RenderParameters,
        impulse_response: AudioBuffer,
    ) -> RenderGraph:
        """
        Wire the effects chain for one render.

        Args:
            source: Input buffer
            params: Render settings
            impulse_response: Stereo reverb kernel at the source sample rate

        Returns:
            Fresh graph; run() yields the rendered samples
        """
        sample_rate = source.sample_rate
        num_frames = rendered_length(source.num_frames, params.playback_rate)
        graph = RenderGraph(self.cancel_event)

        graph.add_stage(
            "source",
            lambda: playback_rate_resample(source.data, params.playback_rate, num_frames),
        )
        graph.add_stage(
            "eq",
            lambda x: apply_low_shelf(x, sample_rate, params.bass_boost_db, self.shelf_frequency),
            inputs=("source",),
        )
        graph.add_stage("dry", lambda x: x * params.dry_mix, inputs=("eq",))
        graph.add_stage(
            "convolve",
            lambda x: convolve_with_impulse(x, impulse_response.data, graph.check_cancelled),
            inputs=("eq",),
        )
        graph.add_stage("wet", lambda x: x * params.wet_mix, inputs=("convolve",))
        graph.add_stage("mix", lambda dry, wet: dry + wet, inputs=("dry", "wet"))
        graph.add_stage(
            "envelope",
            lambda x: x * gain_envelope(num_frames, sample_rate, params.volume_gain),
            inputs=("mix",),
        )
        return graph

    def render(
        self,
        source: Optional[AudioBuffer],
        params: RenderParameters,
        impulse_response: Optional[AudioBuffer] = None,
    ) -> AudioBuffer:
        """
        Render the source through the effects chain.

        Args:
            source: Decoded input buffer
            params: Render settings
            impulse_response: Reverb kernel; synthesized from
                params.reverb_decay when omitted

        Returns:
            New buffer with floor(frames / playback_rate) frames

        Raises:
            SourceNotLoaded: Source is missing or empty
            InvalidParameters: Bad parameters or impulse sample rate mismatch
            RenderCancelled: The cancel event was set during rendering
        """
        if source is None or source.is_empty:
            raise SourceNotLoaded("Audio buffer not loaded")
        params.validate()

        if impulse_response is None:
            synthesizer = self.synthesizer or ImpulseResponseSynthesizer()
            impulse_response = synthesizer.synthesize(source.sample_rate, params.reverb_decay)
        elif impulse_response.sample_rate != source.sample_rate:
            raise InvalidParameters(
                "Impulse response sample rate does not match the source",
                details={
                    "source": source.sample_rate,
                    "impulse_response": impulse_response.sample_rate,
                },
            )

        started = time.perf_counter()
        graph = self.build_graph(source, params, impulse_response)
        rendered = graph.run()

        logger.debug(
            f"Rendered {source.num_frames} -> {rendered.shape[1]} frames "
            f"x {source.num_channels} ch in {time.perf_counter() - started:.3f}s "
            f"(rate={params.playback_rate}, decay={params.reverb_decay}, "
            f"bass={params.bass_boost_db} dB, gain={params.volume_gain}), "
            f"peak {compute_peak(rendered, as_db=True):.1f} dBFS, "
            f"rms {compute_rms(rendered, as_db=True):.1f} dBFS"
        )
        return AudioBuffer(rendered, source.sample_rate)
