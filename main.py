"""
Main entry point for the SpillScope detection visualization CLI.

This script renders the raster artifacts, statistical charts and the HTML
mission report for a detection result produced by the inference service.

To use the CLI, run this script with Python and provide the desired command
and options. For example:

  # Render every artifact and export the mission report
  python main.py render detection.json --image scene.png --output output/

  # Save the charts with the interactive back-end
  python main.py charts detection.json --output output/charts_png

  # Show the active configuration
  python main.py info

For more information on available commands and options, run:
  python main.py --help
"""

from spillscope.interface import cli

if __name__ == '__main__':
    cli()
