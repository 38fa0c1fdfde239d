"""
Sampler application lifecycle - UI-agnostic.

Wires configuration, audio and MIDI together:

- setup: check the output device, open the shared engine if needed, load
  every sample, resolve the MIDI input port
- run: play the startup sound, listen to MIDI until the stop command (or
  Ctrl+C), then play the closing sound
- close: release ports, samples and streams
"""

import logging
import threading
import time
from typing import Callable, Optional

from beatsampler.audio import AudioDevice, AudioStream, Engine, OutputStream, Sample
from beatsampler.core.dispatcher import AmbientSelector, Dispatcher
from beatsampler.core.sequencer import DiagnosticSequencer
from beatsampler.core.tasks import PlaybackTasks
from beatsampler.exceptions import BeatSamplerError, SetupError, collect_errors
from beatsampler.midi import MidiInputManager, MidiOutputManager
from beatsampler.models import AppConfig

logger = logging.getLogger(__name__)


class SamplerApplication:
    """
    Owns every long-lived object of a sampler session.

    Exactly one Engine exists per application in shared-stream mode and it
    is handed to every Sample explicitly; in dedicated mode there is none.
    """

    def __init__(
        self,
        config: AppConfig,
        shared_stream: Optional[bool] = None,
        stream_factory: Callable[..., OutputStream] = AudioStream.open,
        midi_input: Optional[MidiInputManager] = None,
        midi_output: Optional[MidiOutputManager] = None,
        poll_interval: float = 0.15,
    ):
        """
        Initialize the application (nothing is opened yet).

        Args:
            config: Application configuration
            shared_stream: Override for the playback mode; None uses the config
            stream_factory: Opens output streams (swapped out in tests)
            midi_input: Input manager; defaults to the configured port
            midi_output: Output manager for the diagnostic burst
            poll_interval: How often the run loop checks for shutdown (seconds)
        """
        self.config = config
        self.shared_stream = config.resolve_shared_stream() if shared_stream is None else shared_stream
        self.poll_interval = poll_interval

        self._stream_factory = stream_factory
        self.midi_input = midi_input or MidiInputManager(config.midi_input)
        self.midi_output = midi_output or MidiOutputManager(config.midi_output_port)

        self.engine: Optional[Engine] = None
        self.samples: dict[str, Sample] = {}
        self.tasks = PlaybackTasks()
        self.dispatcher: Optional[Dispatcher] = None

        # Set once shutdown is requested (stop sysex, Ctrl+C, request_shutdown)
        self.shutdown_requested = threading.Event()
        # Cancels every in-flight play when shutting down
        self.cancel = threading.Event()

        self._closed = False

    # =================================================================
    # Lifecycle
    # =================================================================

    def setup(self) -> None:
        """
        Open everything the session needs.

        Raises:
            BeatSamplerError: Any setup failure; the process should exit 1
        """
        mode = "shared stream" if self.shared_stream else "dedicated streams"
        logger.info(f"Setting up sampler ({mode})")

        AudioDevice.log_default_output()

        if self.shared_stream:
            engine_config = self.config.engine
            self.engine = Engine.open(
                sample_rate=engine_config.sample_rate,
                channels=engine_config.channels,
                chunk_frames=engine_config.chunk_frames,
                preemption_capacity=engine_config.preemption_capacity,
                device=self.config.audio_device,
                stream_factory=self._stream_factory,
            )

        self._load_samples()

        self.midi_input.find_port()
        self.dispatcher = self._build_dispatcher()
        self.midi_input.on_message(self.dispatcher.handle_message)

    def _load_samples(self) -> None:
        collector = collect_errors("load samples")

        for name, path in self.config.sample_paths().items():
            with collector.try_operation(f"load {name}"):
                self.samples[name] = Sample.load(
                    path,
                    engine=self.engine,
                    chunk_frames=self.config.engine.chunk_frames,
                    device=self.config.audio_device,
                    stream_factory=self._stream_factory,
                )

        if collector.has_errors:
            raise SetupError(
                collector.get_summary(),
                recovery_hint=f"Check the sample files in {self.config.sounds_dir}",
            )
        logger.info(f"Loaded {collector.success_count} samples")

    def _build_dispatcher(self) -> Dispatcher:
        pad_map = {
            key: [self.samples[name] for name in names]
            for key, names in self.config.pad_map.items()
        }
        ambient = AmbientSelector(
            [(self.samples[choice.name], choice.probability) for choice in self.config.ambient],
            seed=self.config.random_seed,
        )
        return Dispatcher(
            pad_map,
            ambient,
            self.tasks,
            on_stop=self.request_shutdown,
            cancel=self.cancel,
        )

    def run(self) -> int:
        """
        Run the session until shutdown is requested.

        Returns:
            Process exit code
        """
        if self.dispatcher is None:
            self.setup()

        try:
            for name in self.config.startup_samples:
                self.samples[name].play(self.cancel)

            if self.config.sequencer.on_startup:
                self.run_diagnostic_burst()

            self.midi_input.start()
            logger.info("Listening to MIDI input")

            if self.config.ready_sample:
                self.samples[self.config.ready_sample].play(self.cancel)

            while not self.shutdown_requested.wait(self.poll_interval):
                pass
        except KeyboardInterrupt:
            logger.info("Interrupted by user")

        self.shutdown()
        return 0

    def request_shutdown(self) -> None:
        """Ask the run loop to stop. Safe from any thread."""
        self.shutdown_requested.set()

    def shutdown(self) -> None:
        """Stop listening, cut off running plays and play the closing sound."""
        self.shutdown_requested.set()
        self.midi_input.stop()

        self.cancel.set()
        if not self.tasks.wait_all(timeout=2.0):
            logger.warning(f"{self.tasks.pending} plays still running at shutdown")

        if self.config.closing_sample:
            self.samples[self.config.closing_sample].play(threading.Event())
            time.sleep(self.config.closing_delay)

        self.close()

    def run_diagnostic_burst(self) -> int:
        """
        Sweep the pad grid with note on/off messages.

        Returns:
            Number of keys swept (0 if the output port is unavailable)
        """
        try:
            self.midi_output.start()
        except BeatSamplerError as e:
            logger.warning(f"Skipping diagnostic burst: {e.technical_message}")
            return 0

        sequencer_config = self.config.sequencer
        sequencer = DiagnosticSequencer(
            self.midi_output.send,
            keys=sequencer_config.keys,
            dwell=sequencer_config.dwell_ms / 1000,
            channel=sequencer_config.channel,
            velocity=sequencer_config.velocity,
        )
        return sequencer.run(self.shutdown_requested)

    def close(self) -> None:
        """Release MIDI ports, samples and the engine. Safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True

        for direction, manager in (("input", self.midi_input), ("output", self.midi_output)):
            if manager.is_connected:
                logger.debug(f"Closing MIDI {direction} port")
                manager.stop()
        for sample in self.samples.values():
            sample.close()
        if self.engine is not None:
            self.engine.close()
        logger.info("Sampler closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
