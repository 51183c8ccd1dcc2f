"""Tree nodes with multipole moments, boundary conditions, a leapfrog pusher and particle I/O."""

__version__ = "0.1.0"