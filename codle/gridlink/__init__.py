"""GridLink: drop pieces on a 9x9 board, first to link two opposite edges wins."""
