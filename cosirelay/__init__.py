"""HTTP relay that sends Cosirob programs to the controller over a serial port."""

__version__ = "1.0.0"
