# camelotmix: Camelot-wheel track analysis and harmonic mix sequencing
# Package: src.camelotmix

__version__ = "1.0.0"
__author__ = "camelotmix contributors"
__description__ = "Key/BPM/energy analysis and harmonic mix ordering on the Camelot wheel"

# Module structure:
#   - camelotmix.analyze    : Signal preprocessing, key and BPM estimation
#   - camelotmix.generate   : Compatibility rules, mix planning, export
#   - camelotmix.library    : Working track set, song list import/export
#   - camelotmix.config     : Configuration management
