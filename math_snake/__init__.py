"""
Math Snake Package
==================

A grid snake game driven by an arithmetic quiz. Steer into the correct
answer to grow; wrong answers shrink the snake.

- snake_core: game state machine, question generator, spawning, scoring
- game_config.yaml: all tunable parameters
"""
