"""Tests for BatchLinearRegressor."""
import unittest

import numpy as np
from numpy.testing import assert_allclose

from regressor import BatchLinearRegressor, LearningRateError, ShapeError


class TestConstruction(unittest.TestCase):
    def test_defaults(self):
        r = BatchLinearRegressor()
        self.assertEqual((r.nx, r.m), (1, 1))
        self.assertEqual(r.alpha, 0.01)

    def test_zeroed_parameters(self):
        for nx, m in [(1, 1), (3, 2), (5, 7)]:
            r = BatchLinearRegressor(nx, m)
            self.assertEqual(r.bias, 0.0)
            assert_allclose(r.weights, np.zeros(nx))
            self.assertEqual(r.X.shape, (nx * m,))
            self.assertEqual(r.y.shape, (m,))
            self.assertFalse(r.features_set or r.targets_set)

    def test_rejects_bad_shape(self):
        for nx, m in [(0, 1), (1, 0), (-2, 3), (1.5, 2), (float("inf"), 1), (1, float("nan")), ("2", 1)]:
            with self.assertRaises(ValueError):
                BatchLinearRegressor(nx, m)

    def test_rejects_non_positive_alpha(self):
        with self.assertRaises(ValueError):
            BatchLinearRegressor(1, 1, 0.0)

    def test_shape_is_read_only(self):
        r = BatchLinearRegressor(2, 3)
        with self.assertRaises(AttributeError):
            r.nx = 4


class TestCommands(unittest.TestCase):
    def setUp(self):
        self.r = BatchLinearRegressor(2, 3, alpha=0.1)

    def test_set_features_wrong_length_leaves_x_unchanged(self):
        self.r.set_features([1, 2, 3, 4, 5, 6])
        before = self.r.X.tobytes()
        for bad in ([1, 2, 3], [0] * 7, []):
            with self.assertRaises(ShapeError) as ctx:
                self.r.set_features(bad)
            self.assertEqual(ctx.exception.expected, 6)
            self.assertEqual(ctx.exception.actual, len(bad))
        self.assertEqual(self.r.X.tobytes(), before)

    def test_shape_error_message_names_counts(self):
        with self.assertRaises(ShapeError) as ctx:
            self.r.set_targets([1.0])
        self.assertIn("expected 3 values for Y", str(ctx.exception))
        self.assertIn("got 1", str(ctx.exception))

    def test_set_targets_and_weights(self):
        self.r.set_targets([1, 2, 3])
        self.r.set_weights([0.5, -0.5])
        assert_allclose(self.r.y, [1, 2, 3])
        assert_allclose(self.r.weights, [0.5, -0.5])
        self.assertTrue(self.r.targets_set)
        with self.assertRaises(ShapeError):
            self.r.set_weights([1, 2, 3])
        assert_allclose(self.r.weights, [0.5, -0.5])

    def test_learning_rate_rejection(self):
        for bad in (0, -1, float("nan")):
            with self.assertRaises(LearningRateError):
                self.r.set_learning_rate(bad)
            self.assertEqual(self.r.alpha, 0.1)
        self.r.set_learning_rate(0.5)
        self.assertEqual(self.r.alpha, 0.5)

    def test_reset_is_idempotent(self):
        self.r.set_features([1, 2, 3, 4, 5, 6])
        self.r.set_targets([1, 1, 1])
        self.r.set_weights([3, 4])
        self.r.set_bias(2.5)
        self.r.reset()
        once = (self.r.weights.copy(), self.r.bias)
        self.r.reset()
        assert_allclose(self.r.weights, once[0])
        self.assertEqual(self.r.bias, once[1])
        assert_allclose(self.r.weights, [0, 0])
        self.assertEqual(self.r.bias, 0.0)
        assert_allclose(self.r.X, [1, 2, 3, 4, 5, 6])
        assert_allclose(self.r.y, [1, 1, 1])
        self.assertEqual(self.r.alpha, 0.1)

    def test_accessors_return_copies(self):
        w = self.r.weights
        w[0] = 99.0
        self.assertEqual(self.r.weights[0], 0.0)


class TestTraining(unittest.TestCase):
    def test_forward_single_sample(self):
        r = BatchLinearRegressor(1, 1)
        r.set_weights([2.0])
        r.set_bias(1.0)
        r.set_features([3.0])
        self.assertEqual(r.forward().tolist(), [7.0])

    def test_forward_does_not_mutate(self):
        r = BatchLinearRegressor(1, 1)
        r.set_features([3.0])
        r.set_weights([2.0])
        r.forward()
        self.assertEqual(r.weights.tolist(), [2.0])
        self.assertEqual(r.bias, 0.0)

    def test_gradient_step(self):
        r = BatchLinearRegressor(1, 1, alpha=0.1)
        r.set_features([1.0])
        r.set_targets([2.0])
        preds = r.forward()
        self.assertEqual(preds.tolist(), [0.0])
        dw, db = r.backward(preds)
        self.assertAlmostEqual(dw[0], -2.0)
        self.assertAlmostEqual(db, -2.0)
        self.assertAlmostEqual(r.weights[0], 0.2)
        self.assertAlmostEqual(r.bias, 0.2)

    def test_feature_major_indexing(self):
        nx, m = 2, 3
        r = BatchLinearRegressor(nx, m)
        # samples as rows, features as columns
        samples = np.array([[1.0, 10.0], [2.0, 20.0], [3.0, 30.0]])
        r.set_features(samples.T.ravel())  # all of feature 0, then feature 1
        r.set_weights([0.5, -0.25])
        r.set_bias(1.0)
        expected = samples @ np.array([0.5, -0.25]) + 1.0
        assert_allclose(r.forward(), expected)
        assert_allclose(r.features_matrix(), samples.T)

    def test_multi_sample_gradient_matches_reference(self):
        rng = np.random.default_rng(7)
        nx, m, alpha = 3, 5, 0.05
        A = rng.standard_normal((m, nx))
        t = rng.standard_normal(m)
        w0, b0 = rng.standard_normal(nx), 0.3

        r = BatchLinearRegressor(nx, m, alpha)
        r.set_features(A.T.ravel())
        r.set_targets(t)
        r.set_weights(w0)
        r.set_bias(b0)
        result = r.step()

        err = A @ w0 + b0 - t
        assert_allclose(result.predictions, A @ w0 + b0)
        self.assertAlmostEqual(result.loss, float(np.mean(err ** 2)))
        assert_allclose(r.weights, w0 - alpha * (A.T @ err) / m)
        self.assertAlmostEqual(r.bias, b0 - alpha * err.mean())

    def test_backward_rejects_wrong_length(self):
        r = BatchLinearRegressor(1, 2)
        with self.assertRaises(ShapeError):
            r.backward([1.0])

    def test_convergence_single_sample(self):
        r = BatchLinearRegressor(1, 1, alpha=0.1)
        r.set_features([1.0])
        r.set_targets([5.0])
        last_gap = float("inf")
        for _ in range(200):
            pred = r.step().predictions[0]
            gap = abs(5.0 - pred)
            self.assertLessEqual(gap, last_gap)
            last_gap = gap
        self.assertAlmostEqual(r.forward()[0], 5.0, places=6)

    def test_unset_data_predicts_from_zeros(self):
        r = BatchLinearRegressor(2, 2)
        r.set_bias(1.5)
        assert_allclose(r.forward(), [1.5, 1.5])


if __name__ == "__main__":
    unittest.main()
