# CLI package for the markovr engine
"""
Demo CLI for the markovr engine.

Commands:
    markovr alphabet  — Walk the alphabet chain
    markovr months    — Invent month names
    markovr tilemap   — Generate a tile map
    markovr inspect   — Show a saved snapshot
"""
