"""
Command line application: configuration, built-in workload and entry point.
"""
