"""
Package for building lazy pipelines over ordered (key, value) sequences. Nothing runs until a
pipeline is iterated, so pipelines can be built over infinite generators and single pass
streams. Imports the primary entrypoint at streams.seq
"""

from lazyseq.pipeline import Pipeline
from lazyseq.streams import seq

__license__ = "MIT"
__version__ = "0.1.0"
__status__ = "Development"
