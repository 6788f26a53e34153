"""Building blocks for FFT-based elasto-viscoplastic crystal plasticity: tensor algebra, FFTs, field updates and VTK output."""

__version__ = "0.1.0"