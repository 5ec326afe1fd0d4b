from __future__ import annotations

import numpy as np


class ProcessingService:
    """Pure NumPy image processing. Inputs and outputs are float32 arrays normalized to [0, 1].

    Channel convention:
    - Grayscale: (H, W)
    - RGB: (H, W, 3)

    No function here mutates its input.
    """

    # Brightness: I_out = I_in * scale. The scale is capped so float32 math never reaches inf.
    @staticmethod
    def scale_brightness(matrix: np.ndarray, scale: float) -> np.ndarray:
        scale = min(float(scale), float(np.finfo(np.float32).max))
        out = np.clip(matrix.astype(np.float32) * np.float32(scale), 0.0, 1.0)
        return out.astype(np.float32)

    # Linear contrast around mid-gray: I_out = (I_in - 0.5) * factor + 0.5
    @staticmethod
    def adjust_linear_contrast(matrix: np.ndarray, factor: float) -> np.ndarray:
        mat = matrix.astype(np.float32)
        out = np.clip((mat - 0.5) * float(factor) + 0.5, 0.0, 1.0)
        return out.astype(np.float32)

    # Crop region [y:y+height, x:x+width]. Caller guarantees the rectangle is in bounds.
    @staticmethod
    def crop(matrix: np.ndarray, x: int, y: int, width: int, height: int) -> np.ndarray:
        return matrix.astype(np.float32)[y : y + height, x : x + width].copy()

    # Rotate clockwise by a multiple of 90 degrees. Lossless; 90/270 swap width and height.
    @staticmethod
    def rotate_quarter_turns(matrix: np.ndarray, degrees: int) -> np.ndarray:
        if degrees % 90 != 0:
            raise ValueError(f"Only multiples of 90 degrees are supported, got {degrees}")
        turns = (degrees // 90) % 4
        # np.rot90 turns counter-clockwise for positive k
        return np.ascontiguousarray(np.rot90(matrix.astype(np.float32), k=-turns, axes=(0, 1)))

    # Reverse the pixel order along one axis: 1 = horizontal (left/right), 0 = vertical
    @staticmethod
    def flip(matrix: np.ndarray, axis: int) -> np.ndarray:
        return np.flip(matrix.astype(np.float32), axis=axis).copy()

    # Reflect one half onto the other. `keep` names the half that survives.
    # An odd-sized middle row/column is left untouched.
    @staticmethod
    def mirror_half(matrix: np.ndarray, keep: str) -> np.ndarray:
        out = matrix.astype(np.float32).copy()
        axis = 1 if keep in ("left", "right") else 0
        half = out.shape[axis] // 2
        if half == 0:
            return out
        src = np.swapaxes(out, 0, axis)
        if keep in ("left", "top"):
            src[-half:] = src[:half][::-1].copy()
        else:
            src[:half] = src[-half:][::-1].copy()
        return out

    # Grayscale (Average): (R + G + B) / 3
    @staticmethod
    def grayscale_average(matrix: np.ndarray) -> np.ndarray:
        mat = matrix.astype(np.float32)
        if mat.ndim == 3 and mat.shape[2] >= 3:
            return np.mean(mat[..., :3], axis=2).astype(np.float32)
        return mat

    # Grayscale (Luminosity): 0.299*R + 0.587*G + 0.114*B
    @staticmethod
    def grayscale_luminosity(matrix: np.ndarray) -> np.ndarray:
        mat = matrix.astype(np.float32)
        if mat.ndim == 3 and mat.shape[2] >= 3:
            weights = np.array([0.299, 0.587, 0.114], dtype=np.float32)
            return np.clip(np.dot(mat[..., :3], weights), 0.0, 1.0).astype(np.float32)
        return mat

    # Grayscale (Midgray / desaturation): (max(R,G,B) + min(R,G,B)) / 2
    @staticmethod
    def grayscale_midgray(matrix: np.ndarray) -> np.ndarray:
        mat = matrix.astype(np.float32)
        if mat.ndim == 3 and mat.shape[2] >= 3:
            mx = np.max(mat[..., :3], axis=2)
            mn = np.min(mat[..., :3], axis=2)
            return ((mx + mn) / 2.0).astype(np.float32)
        return mat

    # HSL saturation scale. Hue and lightness are kept, so each channel moves
    # linearly away from L: I_out = L + (I_in - L) * k, with k capped so S <= 1.
    @staticmethod
    def scale_saturation(matrix: np.ndarray, factor: float) -> np.ndarray:
        mat = matrix.astype(np.float32)
        if mat.ndim != 3 or mat.shape[2] < 3:
            return mat.copy()
        rgb = mat[..., :3]
        mx = rgb.max(axis=2, keepdims=True)
        mn = rgb.min(axis=2, keepdims=True)
        lightness = (mx + mn) / 2.0
        denom = 1.0 - np.abs(2.0 * lightness - 1.0)
        chroma = mx - mn
        sat = np.divide(chroma, denom, out=np.zeros_like(chroma), where=denom > 1e-6)
        sat = np.clip(sat, 0.0, 1.0)
        gray = sat <= 1e-6
        safe = np.where(gray, 1.0, sat)
        k = np.where(gray, 1.0, np.minimum(float(factor), 1.0 / safe))
        out = mat.copy()
        out[..., :3] = np.clip(lightness + (rgb - lightness) * k, 0.0, 1.0)
        return out.astype(np.float32)

    # Normalized 2D Gaussian kernel, sigma = size / 3
    @staticmethod
    def gaussian_kernel(size: int) -> np.ndarray:
        if size <= 0 or size % 2 == 0:
            raise ValueError("Kernel size must be a positive odd number")
        sigma = size / 3.0
        center = size // 2
        ax = np.arange(size, dtype=np.float32) - center
        xx, yy = np.meshgrid(ax, ax)
        kernel = np.exp(-(xx**2 + yy**2) / (2.0 * sigma * sigma))
        return (kernel / kernel.sum()).astype(np.float32)

    # Gaussian blur with edge replication. Output keeps input shape.
    @staticmethod
    def gaussian_blur(matrix: np.ndarray, kernel_size: int) -> np.ndarray:
        mat = matrix.astype(np.float32)
        kernel = ProcessingService.gaussian_kernel(kernel_size)
        pad = kernel_size // 2
        h, w = mat.shape[:2]
        if mat.ndim == 2:
            padded = np.pad(mat, ((pad, pad), (pad, pad)), mode="edge")
        else:
            padded = np.pad(mat, ((pad, pad), (pad, pad), (0, 0)), mode="edge")
        out = np.zeros_like(mat)
        # accumulate shifted copies weighted by the kernel
        for ky in range(kernel_size):
            for kx in range(kernel_size):
                out += kernel[ky, kx] * padded[ky : ky + h, kx : kx + w]
        return np.clip(out, 0.0, 1.0).astype(np.float32)
