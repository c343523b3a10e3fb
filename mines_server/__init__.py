"""Minesweeper rules engine served over HTTP."""
