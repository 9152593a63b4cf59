import numpy as np

from blur_kernel import GaussianKernel, separable_reference, weights_table


def print_matrix(matrix: np.ndarray, out=None) -> None:
    for row in matrix:
        values = "".join(f"{value:.8f} " for value in row)
        print(f"| {values}|", file=out)


def print_weights(kernel: GaussianKernel, out=None) -> None:
    """One line per offset: the diagonal of both matrices next to the 1-D weights."""
    print(f"Weights(Total:{kernel.weights_total:.15f}):", file=out)
    for row in weights_table(kernel).itertuples():
        print(f"[{row.Index:3d}] = {row.raw:.15f} => {row.raw_sqrt:.15f}"
              f" | {row.normalized:.15f} => {row.normalized_sqrt:.15f}"
              f" | {row.gaussian_1d:.15f} => {row.gaussian_1d_normalized:.15f}",
              file=out)


def print_kernel(kernel: GaussianKernel, out=None) -> None:
    print(f"Unnormalized Matrix(Total:{kernel.total:.15f}):", file=out)
    print_matrix(kernel.kernel, out)

    print(f"\nNormalized Matrix(Total:{kernel.normalized.sum():.15f}):", file=out)
    print_matrix(kernel.normalized, out)

    print(file=out)
    print_weights(kernel, out)

    reference = separable_reference(kernel.size, kernel.spec.variance)
    reference_error = float(np.max(np.abs(kernel.normalized - reference)))
    print(f"\nSeparability error: {kernel.separability_error():.3e}", file=out)
    print(f"Reference error: {reference_error:.3e}", file=out)
