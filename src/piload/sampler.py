"""
Copyright 2025 The Flame Authors.
Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at
    http://www.apache.org/licenses/LICENSE-2.0
Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

import math
import random


def in_circle(x: float, y: float) -> bool:
    """Check whether the point (x, y) falls inside the unit quarter circle."""
    return math.sqrt(x * x + y * y) <= 1.0


def draw(rng: random.Random) -> bool:
    """
    Draw a random point in the unit square [0, 1) x [0, 1) and classify it.

    Args:
        rng: The random stream to draw from

    Returns:
        True if the point is inside the quarter circle
    """
    x = rng.random()
    y = rng.random()
    return in_circle(x, y)
