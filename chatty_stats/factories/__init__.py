"""
Factories module for the statistics pipeline.

This module contains the MapReduce operations for site statistics, the chatty
ranking and the registry tying the reduce and ranking phases together.
"""
