from __future__ import annotations

from typing import Union

import numpy as np

MAX_ENTROPY = 8.0


def shannon_entropy(data: Union[bytes, bytearray, memoryview, str]) -> float:
    """Shannon entropy in bits per byte, between 0.0 and 8.0.

    Text is measured over its UTF-8 encoding. Empty input has entropy 0.
    """
    if isinstance(data, str):
        data = data.encode("utf-8", errors="surrogatepass")
    if not data:
        return 0.0
    counts = np.bincount(np.frombuffer(data, dtype=np.uint8), minlength=256)
    probs = counts[counts > 0] / len(data)
    entropy = float(-(probs * np.log2(probs)).sum())
    # a single symbol yields -0.0
    return max(0.0, entropy)
