"""Audio command implementations."""

import click

from beatsampler.audio import AudioDevice


@click.group(name="audio")
def audio_group():
    """Audio device commands."""
    pass


def _display_device_details(info: dict, indent: str = "    ") -> None:
    """Display device details with specified indentation."""
    click.echo(f"{indent}Channels: {info['max_output_channels']} out")
    click.echo(f"{indent}Sample Rate: {info['default_samplerate']} Hz")
    if 'default_low_output_latency' in info:
        latency_ms = info['default_low_output_latency'] * 1000
        click.echo(f"{indent}Latency: {latency_ms:.1f} ms")


@audio_group.command(name="list")
def list_audio():
    """List available audio output devices."""
    devices = AudioDevice.list_output_devices()
    default_device_id = AudioDevice.get_default_device()

    if not devices:
        click.echo("No audio output devices found.")
        return

    click.echo("Audio output devices:\n")
    for device_id, name, host_api, info in devices:
        if device_id == default_device_id:
            click.echo(f"[{device_id}] {name}  [Default]")
        else:
            click.echo(f"[{device_id}] {name}")
        click.echo(f"    Host API: {host_api}")
        _display_device_details(info)
        click.echo()
