"""Interpreter for a grid language of cells and falling byte-valued marbles."""
