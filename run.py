"""
Entry point for the TrackWise crypto position tracker.
"""

from trackwise_crypto.main import cli

if __name__ == "__main__":
    cli()
