# Copyright (c) Facebook, Inc. and its affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.
import json
import math
from unittest import TestCase, main

import torch

from ndview import *

#
# Tensor tests: construction, slicing, element access and the
# copying transformations. Logical results are cross-checked
# against torch wherever torch has the same operation.
#


class TestConstruction(TestCase):
    def test_buffer_is_column_major(self):
        a = array([1, 2, 3, 4, 5, 6], [2, 3])
        self.assertEqual(a.shape, (2, 3))
        self.assertEqual(a.stride, (1, 2))
        self.assertEqual(a.get(1, 0), 2)
        self.assertEqual(a.tolist(), [[1, 3, 5], [2, 4, 6]])
        self.assertEqual(a.dtype, DType.float64)
        self.assertFalse(a.is_view)

    def test_default_shape(self):
        a = array([1, 2, 3], dtype="int32")
        self.assertEqual(a.shape, (3,))
        self.assertEqual(a.data.dtype, torch.int32)

    def test_from_torch(self):
        a = array(torch.arange(4), (2, 2))
        self.assertEqual(a.dtype, DType.int64)
        self.assertEqual(a.tolist(), [[0, 2], [1, 3]])

    def test_bad_data(self):
        for bad in ["abc", [1, "a"], None, {"a": 1}]:
            with self.assertRaises(BadData):
                array(bad)

    def test_shape_size_mismatch(self):
        with self.assertRaises(ShapeSizeMismatch):
            array([1, 2, 3], [2, 2])
        with self.assertRaises(BadShapeSpecifier):
            array([1, 2, 3], [3, "x"])

    def test_unchecked_shape_is_normalized(self):
        a = array([1, 2, 3], 3, disable_checks=True)
        self.assertEqual(a.shape, (3,))
        self.assertEqual(a.tolist(), [1, 2, 3])
        self.assertEqual(array([1, 2, 3, 4], torch.tensor([2, 2]), disable_checks=True).shape, (2, 2))

    def test_filled(self):
        self.assertEqual(zeros([2, 2]).tolist(), [[0, 0], [0, 0]])
        self.assertEqual(ones(3, "int8").tolist(), [1, 1, 1])
        self.assertEqual(ones(3, "int8").dtype, DType.int8)
        self.assertEqual(filled(7, (2,)).tolist(), [7, 7])
        self.assertEqual(zeros([]).shape, (0,))

    def test_eye(self):
        self.assertEqual(eye(3).tolist(), torch.eye(3).tolist())

    def test_arange(self):
        self.assertEqual(arange(5).tolist(), [0, 1, 2, 3, 4])
        self.assertEqual(arange(5).dtype, DType.int32)
        self.assertEqual(arange(2, 5).tolist(), [2, 3, 4])
        self.assertEqual(arange(1, 10, 3).tolist(), [1, 4, 7])
        self.assertEqual(arange(5, 0).shape, (0,))
        floats = arange(0, 1, 0.25)
        self.assertEqual(floats.dtype, DType.float64)
        self.assertEqual(floats.tolist(), [0, 0.25, 0.5, 0.75])

    def test_arange_shape(self):
        self.assertEqual(arange(6, shape=(2, 3)).tolist(), [[0, 1, 2], [3, 4, 5]])
        with self.assertRaises(ShapeSizeMismatch):
            arange(5, shape=(2, 2))

    def test_from_iterable(self):
        a = from_iterable(iter(range(10)), (2, 3))
        self.assertEqual(a.tolist(), [[0, 1, 2], [3, 4, 5]])
        with self.assertRaises(ShapeSizeMismatch):
            from_iterable(range(5), (2, 3))

    def test_from_nested_array(self):
        a = from_nested_array([[1, 2], [3, 4], [5, 6]])
        self.assertEqual(a.shape, (3, 2))
        self.assertEqual(a.get(2, 0), 5)
        self.assertEqual(from_nested_array([[], []]).shape, (2, 0))
        with self.assertRaises(InconsistentNesting):
            from_nested_array([[1, 2], [3]])
        with self.assertRaises(InconsistentNesting):
            from_nested_array([1, [2]])
        with self.assertRaises(BadData):
            from_nested_array("x")


class TestIndexing(TestCase):
    def check_view(self, base, view, shape, values):
        self.assertTrue(view.data is base.data)
        self.assertTrue(view.is_view)
        self.assertEqual(view.shape, shape)
        self.assertEqual(view.tolist(), values)

    def test_index_consistency(self):
        for shape in [(7,), (3, 4), (2, 3, 4, 5)]:
            a = arange(math.prod(shape)).reshape(shape)
            pairs = zip(a.iorder_index_iterator(), a.iorder_data_iterator())
            for k, (index, offset) in enumerate(pairs):
                self.assertEqual(a.compute_real_index(index), offset)
                self.assertEqual(a.get(*index), k)

    def test_slice_drops_axis(self):
        a = arange(24).reshape(2, 3, 4)
        self.check_view(a, a.slice(None, None, 1), (2, 3), [[1, 5, 9], [13, 17, 21]])
        self.check_view(a, a.slice(1), (3, 4), torch.arange(24).reshape(2, 3, 4)[1].tolist())

    def test_slice_ranges(self):
        a = arange(10)
        self.check_view(a, a.slice([2, 5]), (3,), [2, 3, 4])
        self.check_view(a, a.slice([0, 5, 2]), (3,), [0, 2, 4])
        self.check_view(a, a.slice([-3, None]), (3,), [7, 8, 9])
        self.check_view(a, a.slice([-3, -1]), (2,), [7, 8])
        self.check_view(a, a.slice([8, 100]), (2,), [8, 9])
        self.check_view(a, a.slice([None, None, 4]), (3,), [0, 4, 8])

    def test_slice_block(self):
        a = arange(16).reshape(4, 4)
        s = a.slice([0, 2], [1, 3])
        self.assertTrue(s.data is a.data)
        self.assertTrue(s.content_equals(from_nested_array([[1, 2], [5, 6]])))
        self.assertEqual(s.tolist(), torch.arange(16).reshape(4, 4)[0:2, 1:3].tolist())

    def test_slice_of_slice(self):
        a = arange(64).reshape(4, 4, 4)
        s = a.slice([1, 4], None, [0, 4, 2]).slice([1, 3], 2)
        t = torch.arange(64).reshape(4, 4, 4)[1:4, :, 0:4:2][1:3, 2]
        self.check_view(a, s, tuple(t.shape), t.tolist())

    def test_slice_errors(self):
        a = arange(12).reshape(3, 4)
        with self.assertRaises(IndexOutOfBounds):
            a.slice(3)
        with self.assertRaises(IndexError):
            a.slice(None, -5)
        with self.assertRaises(InvalidSliceSpecifier):
            a.slice([0, 2, 0])
        with self.assertRaises(InvalidSliceSpecifier):
            a.slice("x")
        with self.assertRaises(InvalidSliceSpecifier):
            a.slice(0, 0, 0)

    def test_empty_slice_returns_self(self):
        a = arange(4)
        self.assertIs(a.slice(), a)
        self.assertIs(a.slice([]), a)

    def test_python_subscripts(self):
        a = arange(64).reshape(4, 4, 4)
        t = torch.arange(64).reshape(4, 4, 4)
        self.assertEqual(a[1:3, :, ::2].tolist(), t[1:3, :, ::2].tolist())
        self.assertEqual(a[-3:-1].tolist(), t[-3:-1].tolist())
        self.assertEqual(a[..., 0].tolist(), t[..., 0].tolist())
        self.assertEqual(a[1, 2].tolist(), t[1, 2].tolist())
        self.assertEqual(a[1, 2, 3], t[1, 2, 3].item())

    def test_get(self):
        a = arange(12).reshape(3, 4)
        self.assertEqual(a.get(-1, -1), 11)
        with self.assertRaises(InsufficientIndices):
            a.get(1)
        with self.assertRaises(IndexOutOfBounds):
            a.get(3, 0)

    def test_rank_0(self):
        s = arange(6).reshape(2, 3).slice(1, 2)
        self.assertEqual(s.shape, ())
        self.assertEqual(s.length, 1)
        self.assertEqual(s.item(), 5)
        self.assertEqual(str(s), "5")
        s.set(50)
        self.assertEqual(s.item(), 50)

    def test_iter_first_axis(self):
        a = arange(6).reshape(2, 3)
        self.assertEqual(len(a), 2)
        self.assertEqual([row.tolist() for row in a], [[0, 1, 2], [3, 4, 5]])
        self.assertEqual(list(arange(3)), [0, 1, 2])


class TestSet(TestCase):
    def test_single_element(self):
        z = zeros((2, 2))
        z.set(5, 0, 1)
        self.assertEqual(z.tolist(), [[0, 5], [0, 0]])
        with self.assertRaises(NonScalarSingleSet):
            z.set([1, 2], 0, 0)
        b = zeros(2, "int8")
        b.set(200, 1)
        b.set(array([300], dtype="int32"), [0, 1])
        self.assertEqual(b.tolist(), [44, -56])
        z.set(0.1, 1, 1)
        self.assertEqual(z.get(1, 1), 0.1)

    def test_broadcast_row_and_column(self):
        z = zeros((3, 4))
        z.set([1, 2, 3, 4], 1)
        z.set(7, None, 2)
        self.assertEqual(z.tolist(), [[0, 0, 7, 0], [1, 2, 7, 4], [0, 0, 7, 0]])

    def test_set_through_view(self):
        a = zeros((4, 4))
        v = a.slice([1, 3], [1, 3])
        v.set(from_nested_array([[1, 2], [3, 4]]))
        t = torch.zeros(4, 4)
        t[1:3, 1:3] = torch.tensor([[1.0, 2.0], [3.0, 4.0]])
        self.assertEqual(a.tolist(), t.tolist())

    def test_unbroadcastable_leaves_data(self):
        z = zeros((3, 4))
        with self.assertRaises(UnbroadcastableShapes):
            z.set([1, 2, 3], 1)
        self.assertEqual(z.values(), [0] * 12)

    def test_aliased_source(self):
        a = arange(6).reshape(2, 3)
        a[1] = a[0]
        self.assertEqual(a.tolist(), [[0, 1, 2], [0, 1, 2]])

    def test_setitem(self):
        a = zeros((2, 3), "int32")
        a[:, 0] = 5
        a[1, 2] = 9
        self.assertEqual(a.tolist(), [[5, 0, 0], [5, 0, 9]])


class TestTransformations(TestCase):
    def test_squeeze(self):
        a = arange(25).reshape([1, 5, 1, 1, 5, 1])
        s = a.squeeze()
        self.assertTrue(s.data is a.data)
        self.assertEqual(s, arange(25).reshape([5, 5]))

    def test_reshape(self):
        a = arange(24)
        r = a.reshape(6, 4)
        self.assertEqual(r.tolist(), torch.arange(24).reshape(6, 4).tolist())
        self.assertEqual(r.reshape(6, 4), r)
        self.assertEqual(a.reshape([2, -1, 4]).shape, (2, 3, 4))
        self.assertEqual(a.reshape(torch.tensor([4, 6])).shape, (4, 6))
        with self.assertRaises(ShapeSizeMismatch):
            a.reshape(5, 5)

    def test_reshape_view(self):
        a = arange(24).reshape(4, 6)
        t = torch.arange(24).reshape(4, 6)
        r = a.slice([1, 3]).reshape(12)
        self.assertFalse(r.data is a.data)
        self.assertEqual(r.tolist(), t[1:3].reshape(12).tolist())

    def test_flatten(self):
        a = arange(12).reshape(3, 4).slice(None, [1, 3])
        self.assertEqual(a.flatten().tolist(), [1, 2, 5, 6, 9, 10])

    def test_transpose(self):
        a = arange(24).reshape(2, 3, 4)
        t = torch.arange(24).reshape(2, 3, 4).permute(2, 1, 0)
        self.assertEqual(a.transpose().shape, (4, 3, 2))
        self.assertEqual(a.transpose().tolist(), t.tolist())
        self.assertEqual(a.transpose().transpose(), a)

    def test_as_type(self):
        a = arange(4)
        f = a.as_type("float32")
        self.assertEqual(f.dtype, DType.float32)
        self.assertEqual(f.data.dtype, torch.float32)
        self.assertEqual(f.tolist(), [0, 1, 2, 3])
        self.assertFalse(f.data is a.data)

    def test_clip_neg(self):
        self.assertEqual(arange(5).clip(1, 3).tolist(), [1, 1, 2, 3, 3])
        self.assertEqual((-arange(3)).tolist(), [0, -1, -2])

    def test_triangles(self):
        a = arange(16).reshape(4, 4)
        t = torch.arange(16).reshape(4, 4)
        self.assertEqual(a.triu().tolist(), torch.triu(t).tolist())
        self.assertEqual(a.triu(1).tolist(), torch.triu(t, 1).tolist())
        self.assertEqual(a.tril(-1).tolist(), torch.tril(t, -1).tolist())
        with self.assertRaises(BadShapeSpecifier):
            arange(4).triu()

    def test_copy(self):
        s = arange(6).slice([1, 4])
        c = s.copy()
        self.assertFalse(c.data is s.data)
        self.assertEqual(c.tolist(), [1, 2, 3])
        self.assertTrue(c.content_equals(s))
        self.assertFalse(c == s)


class TestEquality(TestCase):
    def test_structural(self):
        self.assertEqual(array([1, 2, 3]), array([1, 2, 3]))
        self.assertNotEqual(array([1, 2, 3]), array([1, 2, 4]))
        self.assertNotEqual(array([1, 2, 3], dtype="int32"), array([1, 2, 3]))
        self.assertNotEqual(array([1, 2, 3, 4]), array([1, 2, 3, 4], [2, 2]))
        self.assertNotEqual(arange(3), [0, 1, 2])

    def test_view_vs_fresh(self):
        s = arange(6).slice([1, 3])
        self.assertNotEqual(s, arange(1, 3))
        self.assertTrue(s.content_equals(arange(1, 3)))


class TestConversion(TestCase):
    def test_to_json(self):
        a = arange(4).reshape(2, 2)
        self.assertEqual(a.to_json(), {"data": [[0, 1], [2, 3]], "shape": [2, 2], "dtype": "int32"})

    def test_json_round_trip(self):
        for v in [arange(12).reshape(3, 4), ones((2, 1, 3)), arange(0), zeros((0, 2)), zeros((2, 0, 3), "int8")]:
            self.assertEqual(from_json(v.to_json()), v)
            self.assertEqual(from_json(json.dumps(v.to_json())), v)

    def test_from_json_errors(self):
        with self.assertRaises(ShapeSizeMismatch):
            from_json({"data": [1, 2], "shape": [3], "dtype": "int32"})
        with self.assertRaises(BadData):
            from_json({"shape": [3]})

    def test_nonzero(self):
        self.assertEqual(array([0, 1, 0, 2]).nonzero(), [(1,), (3,)])
        self.assertEqual(eye(2).nonzero(), [(0, 0), (1, 1)])

    def test_str(self):
        self.assertEqual(str(arange(4).reshape(2, 2)), "[[0, 1],\n [2, 3]]")
        self.assertEqual(str(arange(3)), "[0, 1, 2]")


if __name__ == "__main__":
    main()
