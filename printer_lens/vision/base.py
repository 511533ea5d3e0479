import abc
import numpy as np


def to_batch(tensor: np.ndarray, channels_first: bool) -> np.ndarray:
    """HWC tensor -> contiguous [1, H, W, 3] (or [1, 3, H, W]) float32 batch."""
    if channels_first:
        tensor = tensor.transpose((2, 0, 1))
    return np.ascontiguousarray(tensor[None, ...], dtype=np.float32)


class BaseModelRunner(abc.ABC):

    @abc.abstractmethod
    def infer(self, tensor: np.ndarray) -> np.ndarray:
        """
        Input: float32 RGB tensor [S, S, 3], values in [0, 1]
        Output: raw predictions [1, 5, N] -> cx, cy, w, h, confidence

        Failures while running the model must surface as InferenceFailure.
        """
        pass

    def close(self) -> None:
        """Releases the model session. Optional for backends without one."""
        pass
