"""Basic example: play samples one after the other, then cut one off."""

import logging
import sys
import threading
import time
from pathlib import Path

from beatsampler.audio import Engine, Sample
from beatsampler.core import PlaybackTasks
from beatsampler.exceptions import BeatSamplerError

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


def main():
    """Load every WAV in a directory and play them through the shared engine."""

    sounds_dir = Path(sys.argv[1] if len(sys.argv) > 1 else "sounds")

    sample_files = sorted(sounds_dir.glob("*.wav"))
    if not sample_files:
        print(f"No WAV files found in {sounds_dir}")
        return

    print(f"Found {len(sample_files)} samples:")
    for i, file in enumerate(sample_files):
        print(f"  {i}: {file.name}")

    try:
        engine = Engine.open()
    except BeatSamplerError as e:
        print(f"Error: {e.get_full_message()}")
        return

    with engine:
        samples = [Sample.load(path, engine=engine) for path in sample_files]
        cancel = threading.Event()

        print(f"\nPlaying {len(samples)} samples sequentially...\n")
        for sample in samples:
            print(f"Playing: {sample.name} -> {sample.play(cancel).value}")

        if len(samples) > 1:
            print("\nTriggering the first sample, then cutting it off with the second...")
            tasks = PlaybackTasks()
            first = tasks.spawn(samples[0], cancel)
            time.sleep(0.1)
            second = tasks.spawn(samples[1], cancel)
            print(f"  {samples[0].name}: {first.result().value}")
            print(f"  {samples[1].name}: {second.result().value}")

        for sample in samples:
            sample.close()

    print("\nPlayback complete!")


if __name__ == "__main__":
    main()
