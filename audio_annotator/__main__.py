"""Package entry point for ``python -m audio_annotator``.

Delegates to the CLI's main() function. The HTTP API has its own console
script, ``audio-annotator-api``.
"""

from audio_annotator.cli import main

if __name__ == "__main__":
    main()
