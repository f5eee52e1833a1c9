"""SRS shape and wall kick data.

All values are y-up: +x is right, +y is up. Shapes are given in the spawn
orientation around the piece origin; the other orientations are derived by
rotating these cells (see geometry.rotate_cells).

Kick tables are ordered row lists so they can be indexed by the transition
row computed in rules.kick_index. The first offset of every row is (0, 0),
so an unobstructed rotation never moves the piece.
"""

# Spawn cells per tetromino
CELLS = {
    "I": [(-1, 1), (0, 1), (1, 1), (2, 1)],
    "O": [(0, 1), (1, 1), (0, 0), (1, 0)],
    "T": [(0, 1), (-1, 0), (0, 0), (1, 0)],
    "J": [(-1, 1), (-1, 0), (0, 0), (1, 0)],
    "L": [(1, 1), (-1, 0), (0, 0), (1, 0)],
    "S": [(0, 1), (1, 1), (-1, 0), (0, 0)],
    "Z": [(-1, 1), (0, 1), (0, 0), (1, 0)],
}

# 90 degree kicks for J, L, S, T, Z
# Rows: 0->R, R->0, R->2, 2->R, 2->L, L->2, L->0, 0->L
WALL_KICKS_JLSTZ = [
    [(0, 0), (-1, 0), (-1, 1), (0, -2), (-1, -2)],  # 0->R
    [(0, 0), (1, 0), (1, -1), (0, 2), (1, 2)],      # R->0
    [(0, 0), (1, 0), (1, -1), (0, 2), (1, 2)],      # R->2
    [(0, 0), (-1, 0), (-1, 1), (0, -2), (-1, -2)],  # 2->R
    [(0, 0), (1, 0), (1, 1), (0, -2), (1, -2)],     # 2->L
    [(0, 0), (-1, 0), (-1, -1), (0, 2), (-1, 2)],   # L->2
    [(0, 0), (-1, 0), (-1, -1), (0, 2), (-1, 2)],   # L->0
    [(0, 0), (1, 0), (1, 1), (0, -2), (1, -2)],     # 0->L
]

# 90 degree kicks for I (different from JLSTZ)
WALL_KICKS_I = [
    [(0, 0), (-2, 0), (1, 0), (-2, -1), (1, 2)],   # 0->R
    [(0, 0), (2, 0), (-1, 0), (2, 1), (-1, -2)],   # R->0
    [(0, 0), (-1, 0), (2, 0), (-1, 2), (2, -1)],   # R->2
    [(0, 0), (1, 0), (-2, 0), (1, -2), (-2, 1)],   # 2->R
    [(0, 0), (2, 0), (-1, 0), (2, 1), (-1, -2)],   # 2->L
    [(0, 0), (-2, 0), (1, 0), (-2, -1), (1, 2)],   # L->2
    [(0, 0), (1, 0), (-2, 0), (1, -2), (-2, 1)],   # L->0
    [(0, 0), (-1, 0), (2, 0), (-1, 2), (2, -1)],   # 0->L
]

# O piece doesn't kick: a single row, every transition wraps onto it
WALL_KICKS_O = [
    [(0, 0)],
]

# 180 degree kicks, one row per starting rotation
# Rows: 0->2, R->L, 2->0, L->R
WALL_KICKS_180 = [
    [(0, 0), (0, 1), (1, 1), (-1, 1), (1, 0), (-1, 0)],      # 0->2
    [(0, 0), (1, 0), (1, 2), (1, 1), (0, 2), (0, 1)],        # R->L
    [(0, 0), (0, -1), (-1, -1), (1, -1), (-1, 0), (1, 0)],   # 2->0
    [(0, 0), (-1, 0), (-1, 2), (-1, 1), (0, 2), (0, 1)],     # L->R
]

WALL_KICKS_180_O = [
    [(0, 0)],
]
