"""Vectorised escape-time kernel running a column block on TensorFlow."""

from __future__ import annotations

from typing import Optional

import numpy as np
import tensorflow as tf

from .escape import SEED, EscapeParameters


@tf.function
def _escape_step(
    zr: tf.Tensor,
    zi: tf.Tensor,
    cr: tf.Tensor,
    ci: tf.Tensor,
    ns: tf.Tensor,
    active: tf.Tensor,
    threshold: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Perform a single iteration for the points that have not escaped."""

    zr_new = zr * zr - zi * zi + cr
    zi_new = zr * zi + zi * zr + ci
    zr = tf.where(active, zr_new, zr)
    zi = tf.where(active, zi_new, zi)
    ns = ns + tf.cast(active, tf.int32)
    az = tf.sqrt(tf.abs(zr * zr + zi * zi))
    new_active = tf.logical_and(active, az < threshold)
    return zr, zi, ns, new_active


@tf.function
def _escape_run(
    cr: tf.Tensor,
    ci: tf.Tensor,
    max_updates: tf.Tensor,
    threshold: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor]:
    """Iterate every point with a masked TensorFlow while loop."""

    zr = tf.fill(tf.shape(cr), tf.constant(SEED.real, dtype=tf.float64))
    zi = tf.fill(tf.shape(cr), tf.constant(SEED.imaginary, dtype=tf.float64))
    ns = tf.zeros(tf.shape(cr), dtype=tf.int32)
    active = tf.sqrt(tf.abs(zr * zr + zi * zi)) < threshold
    i = tf.constant(0, dtype=tf.int32)

    def cond(i, zr, zi, ns, active):
        return tf.logical_and(tf.less(i, max_updates), tf.reduce_any(active))

    def body(i, zr, zi, ns, active):
        zr, zi, ns, active = _escape_step(zr, zi, cr, ci, ns, active, threshold)
        return i + 1, zr, zi, ns, active

    _, _, _, ns, active = tf.while_loop(cond, body, (i, zr, zi, ns, active))
    return ns, active


def escape_block(
    real: np.ndarray,
    imaginary: np.ndarray,
    params: EscapeParameters,
    *,
    device: Optional[str] = None,
) -> np.ndarray:
    """Escape values for the grid ``real x imaginary``.

    The result has shape ``(len(real), len(imaginary))``, so iterating it in
    C order walks each column top to bottom. Bounded points are ``NaN``.
    """

    with tf.device(device if device is not None else "/CPU:0"):
        xs = tf.convert_to_tensor(np.asarray(real, dtype=np.float64), dtype=tf.float64)
        ys = tf.convert_to_tensor(np.asarray(imaginary, dtype=np.float64), dtype=tf.float64)
        cr, ci = tf.meshgrid(xs, ys, indexing="ij")
        # The orbit is updated at most max_iterations + 1 times.
        max_updates = tf.constant(params.max_iterations + 1, dtype=tf.int32)
        threshold = tf.constant(params.stability_threshold, dtype=tf.float64)
        ns, active = _escape_run(cr, ci, max_updates, threshold)

    iterations = ns.numpy().astype(np.float64)
    values = np.minimum(iterations / np.float64(params.max_iterations), 1.0)
    return np.where(active.numpy(), np.nan, values)
