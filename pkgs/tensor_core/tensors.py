"""
Dense rank 0-4 tensors with index contraction and change of basis.

Index convention (used everywhere in the engine): a rank-r tensor is addressed as
T[i0, ..., i(r-1)] and flattened in row-major (C) order.  Contracting index p of A with
index q of B yields the free indices of A in order, followed by the free indices of B.

Storage is a float64 torch tensor owned by the instance.  Operations never mutate;
every one of them returns a fresh tensor whose class matches the result rank
(Scalar, Vector, Matrix, Tensor3D, Tensor4D).
"""
from __future__ import annotations

from numbers import Real
from typing import Dict, Iterable, List, Sequence, Tuple, Type, Union

import numpy as np
import torch

from pkgs.common import (
    METRIC_RCOND_TOL, SYMMETRY_TOL,
    IndexOutOfBounds, RankMismatch, ShapeMismatch, SingularMetric,
)

MAX_RANK = 4
DTYPE = torch.float64

Shape = Tuple[int, ...]


def _as_shape(shape: Iterable[int]) -> Shape:
    if isinstance(shape, int):
        shape = (shape,)
    shape = tuple(int(s) for s in shape)
    if len(shape) > MAX_RANK:
        raise RankMismatch(f"rank {len(shape)} exceeds the supported maximum of {MAX_RANK}")
    if any(s <= 0 for s in shape):
        raise ShapeMismatch(f"every dimension must be positive, got {shape}")
    return shape


class Tensor:
    """Dense float64 tensor of rank 0-4 with a fixed shape."""

    RANK = None  # fixed by the rank-specific subclasses

    def __new__(cls, data=None):
        if cls is Tensor and data is not None:
            rank = data.rank if isinstance(data, Tensor) else np.ndim(data)
            cls = _RANK_CLASSES.get(rank, Tensor)
        return super().__new__(cls)

    def __init__(self, data):
        if isinstance(data, Tensor):
            data = data._data
        t = torch.as_tensor(data, dtype=DTYPE).detach().clone()
        if t.dim() > MAX_RANK:
            raise RankMismatch(f"rank {t.dim()} exceeds the supported maximum of {MAX_RANK}")
        if self.RANK is not None and t.dim() != self.RANK:
            raise RankMismatch(f"{type(self).__name__} needs rank {self.RANK}, got {t.dim()}")
        self._data = t

    @staticmethod
    def _wrap(data: torch.Tensor) -> "Tensor":
        rank = data.dim()
        if rank > MAX_RANK:
            raise RankMismatch(f"result rank {rank} exceeds the supported maximum of {MAX_RANK}")
        obj = _RANK_CLASSES[rank].__new__(_RANK_CLASSES[rank])
        obj._data = data.detach().to(DTYPE).clone()
        return obj

    # --- construction ---
    @classmethod
    def zeros(cls, shape: Iterable[int]) -> "Tensor":
        return Tensor._wrap(torch.zeros(_as_shape(shape), dtype=DTYPE))

    @classmethod
    def from_values(cls, shape: Iterable[int], values) -> "Tensor":
        """Build a tensor from row-major values (flat or already nested)."""
        shape = _as_shape(shape)
        arr = np.asarray(values, dtype=np.float64)
        expected = int(np.prod(shape)) if shape else 1
        if arr.size != expected:
            raise ShapeMismatch(f"shape {shape} needs {expected} values, got {arr.size}")
        return Tensor._wrap(torch.as_tensor(arr.reshape(shape), dtype=DTYPE))

    @classmethod
    def identity(cls, dim: int) -> "Matrix":
        return Tensor._wrap(torch.eye(int(dim), dtype=DTYPE))

    # --- introspection ---
    @property
    def shape(self) -> Shape:
        return tuple(self._data.shape)

    @property
    def rank(self) -> int:
        return self._data.dim()

    @property
    def data(self) -> torch.Tensor:
        """Copy of the backing torch tensor."""
        return self._data.clone()

    def to_numpy(self) -> np.ndarray:
        return self._data.cpu().numpy().copy()

    def to_flat(self) -> Tuple[List[int], List[float]]:
        """(shape descriptor, row-major values) for callers outside the engine."""
        return list(self.shape), [float(v) for v in self._data.reshape(-1).tolist()]

    @classmethod
    def from_flat(cls, shape: Sequence[int], values: Sequence[float]) -> "Tensor":
        """Inverse of `to_flat`."""
        return cls.from_values(shape, values)

    # --- element access ---
    def _check_indices(self, indices) -> Tuple[int, ...]:
        if isinstance(indices, (int, np.integer)):
            indices = (indices,)
        indices = tuple(indices)
        if len(indices) != self.rank:
            raise IndexOutOfBounds(f"rank-{self.rank} tensor needs {self.rank} indices, got {len(indices)}")
        for axis, (i, dim) in enumerate(zip(indices, self.shape)):
            if not 0 <= int(i) < dim:
                raise IndexOutOfBounds(f"index {i} out of bounds for axis {axis} with dimension {dim}")
        return tuple(int(i) for i in indices)

    def get(self, indices=()) -> float:
        return float(self._data[self._check_indices(indices)])

    def set(self, indices, value: float) -> "Tensor":
        """Return a copy with one component replaced."""
        idx = self._check_indices(indices)
        data = self._data.clone()
        data[idx] = float(value)
        return Tensor._wrap(data)

    def _check_axis(self, axis: int) -> int:
        if not 0 <= int(axis) < self.rank:
            raise RankMismatch(f"rank-{self.rank} tensor has no index {axis}")
        return int(axis)

    # --- arithmetic ---
    def _check_same_shape(self, other: "Tensor", op: str):
        if not isinstance(other, Tensor):
            raise TypeError(f"cannot {op} Tensor and {type(other).__name__}")
        if self.shape != other.shape:
            raise ShapeMismatch(f"cannot {op} shapes {self.shape} and {other.shape}")

    def add(self, other: "Tensor") -> "Tensor":
        self._check_same_shape(other, "add")
        return Tensor._wrap(self._data + other._data)

    def sub(self, other: "Tensor") -> "Tensor":
        self._check_same_shape(other, "subtract")
        return Tensor._wrap(self._data - other._data)

    def scale(self, factor: Union[float, "Scalar"]) -> "Tensor":
        """Multiply every component by a real number or an explicit rank-0 tensor."""
        if isinstance(factor, Tensor):
            if factor.rank != 0:
                raise RankMismatch(f"scale factor must be rank 0, got rank {factor.rank}")
            factor = factor.get()
        if not isinstance(factor, Real):
            raise TypeError(f"scale factor must be real, got {type(factor).__name__}")
        return Tensor._wrap(self._data * float(factor))

    def neg(self) -> "Tensor":
        return self.scale(-1.0)

    def __add__(self, other):
        return self.add(other)

    def __sub__(self, other):
        return self.sub(other)

    def __neg__(self):
        return self.neg()

    def __mul__(self, factor):
        return self.scale(factor)

    __rmul__ = __mul__

    # --- index algebra ---
    def contract(self, index: int, other: "Tensor", other_index: int) -> "Tensor":
        return contract(self, index, other, other_index)

    def trace(self, i: int = 0, j: int = 1) -> "Tensor":
        """Contract two indices of the same tensor (Σ_k T[..k..k..])."""
        i, j = self._check_axis(i), self._check_axis(j)
        if i == j:
            raise RankMismatch("cannot trace an index with itself")
        if self.shape[i] != self.shape[j]:
            raise RankMismatch(f"indices {i} and {j} have dimensions {self.shape[i]} and {self.shape[j]}")
        return Tensor._wrap(torch.diagonal(self._data, dim1=i, dim2=j).sum(-1))

    def outer(self, other: "Tensor") -> "Tensor":
        if self.rank + other.rank > MAX_RANK:
            raise RankMismatch(f"outer product rank {self.rank + other.rank} exceeds {MAX_RANK}")
        return Tensor._wrap(torch.tensordot(self._data, other._data, dims=0))

    def permute(self, axes: Sequence[int]) -> "Tensor":
        axes = tuple(int(a) for a in axes)
        if sorted(axes) != list(range(self.rank)):
            raise RankMismatch(f"{axes} is not a permutation of the {self.rank} indices")
        return Tensor._wrap(self._data.permute(*axes).contiguous())

    def swap(self, i: int = 0, j: int = 1) -> "Tensor":
        i, j = self._check_axis(i), self._check_axis(j)
        return Tensor._wrap(torch.transpose(self._data, i, j).contiguous())

    def symmetrize(self, i: int = 0, j: int = 1) -> "Tensor":
        """T_(ij) = ½ (T_ij + T_ji)"""
        swapped = self.swap(i, j)
        if swapped.shape != self.shape:
            raise RankMismatch(f"indices {i} and {j} have different dimensions")
        return Tensor._wrap(0.5 * (self._data + swapped._data))

    def antisymmetrize(self, i: int = 0, j: int = 1) -> "Tensor":
        """T_[ij] = ½ (T_ij - T_ji)"""
        swapped = self.swap(i, j)
        if swapped.shape != self.shape:
            raise RankMismatch(f"indices {i} and {j} have different dimensions")
        return Tensor._wrap(0.5 * (self._data - swapped._data))

    def is_symmetric(self, i: int = 0, j: int = 1, tol: float = SYMMETRY_TOL) -> bool:
        swapped = self.swap(i, j)
        if swapped.shape != self.shape:
            return False
        return bool((self._data - swapped._data).abs().max().item() <= tol)

    def norm(self) -> float:
        """Frobenius norm."""
        return float(torch.linalg.vector_norm(self._data).item())

    def allclose(self, other: "Tensor", atol: float = 1e-9, rtol: float = 0.0) -> bool:
        return self.shape == other.shape and bool(torch.allclose(self._data, other._data, rtol=rtol, atol=atol))

    def __eq__(self, other):
        if not isinstance(other, Tensor):
            return NotImplemented
        return self.shape == other.shape and bool(torch.equal(self._data, other._data))

    __hash__ = None

    def __repr__(self):
        return f"{type(self).__name__}(shape={self.shape}, values={self._data.tolist()})"


class Scalar(Tensor):
    """Rank-0 tensor; the only explicit path for scalar arithmetic."""
    RANK = 0

    @property
    def value(self) -> float:
        return float(self._data.item())

    def __float__(self):
        return self.value


class Vector(Tensor):
    RANK = 1


class Matrix(Tensor):
    RANK = 2


class Tensor3D(Tensor):
    RANK = 3


class Tensor4D(Tensor):
    RANK = 4


_RANK_CLASSES: Dict[int, Type[Tensor]] = {0: Scalar, 1: Vector, 2: Matrix, 3: Tensor3D, 4: Tensor4D}


def zeros(shape: Iterable[int]) -> Tensor:
    return Tensor.zeros(shape)


def from_values(shape: Iterable[int], values) -> Tensor:
    return Tensor.from_values(shape, values)


def add(a: Tensor, b: Tensor) -> Tensor:
    return a.add(b)


def scale(t: Tensor, factor) -> Tensor:
    return t.scale(factor)


def contract(tensor_a: Tensor, index_a: int, tensor_b: Tensor, index_b: int) -> Tensor:
    """Einstein summation over one index of each operand: Σ_k A[..k..] B[..k..]."""
    index_a = tensor_a._check_axis(index_a)
    index_b = tensor_b._check_axis(index_b)
    da, db = tensor_a.shape[index_a], tensor_b.shape[index_b]
    if da != db:
        raise RankMismatch(f"cannot contract index {index_a} (dim {da}) with index {index_b} (dim {db})")
    result_rank = tensor_a.rank + tensor_b.rank - 2
    if result_rank > MAX_RANK:
        raise RankMismatch(f"contraction result rank {result_rank} exceeds {MAX_RANK}")
    return Tensor._wrap(torch.tensordot(tensor_a._data, tensor_b._data, dims=([index_a], [index_b])))


def _basis_matrix(basis) -> torch.Tensor:
    B = basis._data if isinstance(basis, Tensor) else torch.as_tensor(np.asarray(basis, dtype=np.float64))
    if B.dim() != 2 or B.shape[0] != B.shape[1]:
        raise ShapeMismatch(f"basis must be a square matrix, got shape {tuple(B.shape)}")
    return B.to(DTYPE)


def transform(tensor: Tensor, basis_matrix, covariant: Sequence[int] = ()) -> Tensor:
    """
    Apply a linear change of basis to every free index.

    Contravariant index k:  T'[..i..] = B[i, a] T[..a..]
    Covariant index k:      T'[..i..] = (B⁻¹)ᵀ[i, a] T[..a..]
    """
    B = _basis_matrix(basis_matrix)
    dim = B.shape[0]
    for axis, d in enumerate(tensor.shape):
        if d != dim:
            raise ShapeMismatch(f"index {axis} has dimension {d}, basis has dimension {dim}")
    covariant = {tensor._check_axis(k) for k in covariant}
    B_cov = None
    if covariant:
        s = torch.linalg.svdvals(B)
        if s.min().item() <= METRIC_RCOND_TOL * s.max().item():
            raise SingularMetric("basis matrix is not invertible; covariant indices cannot be transformed")
        B_cov = torch.linalg.inv(B).T
    out = tensor._data
    for k in range(tensor.rank):
        M = B_cov if k in covariant else B
        out = torch.movedim(torch.tensordot(M, out, dims=([1], [k])), 0, k)
    return Tensor._wrap(out)
