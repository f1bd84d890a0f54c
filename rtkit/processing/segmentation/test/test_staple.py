import unittest

import numpy as np

from rtkit import InvalidArgumentError
from rtkit.data.images import BinImage, BinVolume, Image2D
from rtkit.processing.segmentation import BinMatcher, Staple, solveStaple


class StapleTestCase(unittest.TestCase):
    def setUp(self):
        self.image = Image2D(gridSize=(3, 3))

    def matcher(self, *arrays, image=None):
        image = self.image if image is None else image
        volumes = [BinVolume([BinImage(np.asarray(array, dtype=np.uint8), image)]) for array in arrays]
        return BinMatcher(volumes)

    def testInvalidBinMatcher(self):
        self.assertRaises(InvalidArgumentError, lambda: Staple('binMatcher'))
        self.assertRaises(InvalidArgumentError, lambda: Staple(self.matcher(np.zeros((3, 3)))))

    def testUnequalShapes(self):
        first = BinVolume([BinImage(np.zeros((3, 3), dtype=np.uint8), self.image)])
        second = BinVolume([BinImage(np.zeros((3, 4), dtype=np.uint8), Image2D(gridSize=(3, 4)))])
        with self.assertRaises(InvalidArgumentError) as context:
            Staple(BinMatcher([first, second]))
        self.assertIn("'binMatcher'", str(context.exception))

    def testTransposedShapes(self):
        first = BinVolume([BinImage(np.zeros((4, 3), dtype=np.uint8), Image2D(gridSize=(4, 3)))])
        second = BinVolume([BinImage(np.zeros((3, 4), dtype=np.uint8), Image2D(gridSize=(3, 4)))])
        self.assertRaises(InvalidArgumentError, lambda: Staple(BinMatcher([first, second])))

    def testInvalidMaxIterations(self):
        matcher = self.matcher(np.zeros((3, 3)), np.zeros((3, 3)))
        self.assertRaises(InvalidArgumentError, lambda: Staple(matcher, maxIterations=0))
        self.assertRaises(InvalidArgumentError, lambda: Staple(matcher, maxIterations=2.5))

    def testEquality(self):
        matcher = self.matcher(np.zeros((3, 3)), np.ones((3, 3)))
        self.assertEqual(Staple(matcher), Staple(matcher))
        self.assertNotEqual(Staple(matcher), Staple(matcher, maxIterations=4))
        self.assertNotEqual(Staple(matcher), 42)

    def testAllZeros(self):
        staple = Staple(self.matcher(np.zeros((3, 3)), np.zeros((3, 3))))
        staple.solve()
        self.assertEqual(staple.trueSegmentation.max(), 0)
        self.assertEqual(staple.trueSegmentation.shape, (3, 3, 1))
        np.testing.assert_array_equal(staple.p, [0, 0])
        np.testing.assert_array_equal(staple.q, [1, 1])
        self.assertEqual(staple.phi.shape, (2, 2))

    def testAllOnes(self):
        staple = Staple(self.matcher(np.ones((3, 3)), np.ones((3, 3))))
        staple.solve()
        self.assertEqual(staple.trueSegmentation.min(), 1)
        np.testing.assert_array_equal(staple.p, [1, 1])
        np.testing.assert_array_equal(staple.q, [1, 1])
        np.testing.assert_array_equal(staple.phi, np.ones((2, 2)))

    def testOppositeSegmentations(self):
        image = Image2D(gridSize=(2, 2))
        staple = Staple(self.matcher([[0, 1], [1, 0]], [[1, 0], [0, 1]], image=image))
        staple.solve()
        np.testing.assert_array_almost_equal(staple.weights, [0.5] * 4)
        np.testing.assert_array_almost_equal(staple.p, [0.5, 0.5])
        np.testing.assert_array_almost_equal(staple.q, [0.5, 0.5])
        # ties belong to the segmentation
        np.testing.assert_array_equal(staple.trueSegmentation[:, :, 0], np.ones((2, 2)))

    def testShapePreserved(self):
        images = [Image2D(gridSize=(3, 4), origin=(0, 0, z)) for z in (0.0, 2.0)]
        rng = np.random.default_rng(3)
        volumes = [BinVolume([BinImage(rng.integers(0, 2, (3, 4), dtype=np.uint8), image) for image in images])
                   for _ in range(2)]
        staple = Staple(BinMatcher(volumes))
        staple.solve()
        self.assertEqual(staple.trueSegmentation.shape, (3, 4, 2))
        self.assertEqual(staple.probabilityMap.shape, (3, 4, 2))
        self.assertEqual((staple.n, staple.r), (24, 2))

    def testMultiSliceIdenticalRaters(self):
        images = [Image2D(gridSize=(3, 3), origin=(0, 0, z)) for z in (0.0, 3.0, 6.0)]
        arrays = [np.zeros((3, 3), dtype=np.uint8) for _ in images]
        arrays[0][1, 1] = 1
        arrays[1][0:2, 0:2] = 1
        volumes = [BinVolume([BinImage(array.copy(), image) for array, image in zip(arrays, images)]) for _ in range(2)]
        staple = Staple(BinMatcher(volumes))
        staple.solve()
        np.testing.assert_array_almost_equal(staple.p, [1, 1])
        np.testing.assert_array_almost_equal(staple.q, [1, 1])
        np.testing.assert_array_equal(staple.trueSegmentation, np.stack(arrays, axis=2))

    def testUpdatesBinMatcher(self):
        matcher = self.matcher(np.ones((3, 3)), np.ones((3, 3)))
        Staple(matcher).solve()
        self.assertEqual(matcher.master.name, 'STAPLE')
        self.assertEqual(matcher.master.imageArray().min(), 1)
        self.assertIs(matcher.master.images[0], self.image)
        for volume in matcher.volumes:
            self.assertEqual((volume.sensitivity, volume.specificity), (1.0, 1.0))

    def testAlignsVolumes(self):
        images = [Image2D(gridSize=(3, 3), origin=(0, 0, z)) for z in (0.0, 3.0)]
        first = BinVolume([BinImage(np.ones((3, 3), dtype=np.uint8), images[0])])
        second = BinVolume([BinImage(np.ones((3, 3), dtype=np.uint8), images[1]),
                            BinImage(np.ones((3, 3), dtype=np.uint8), images[0])])
        staple = Staple(BinMatcher([first, second]))
        self.assertEqual(first.frames, 2)
        self.assertEqual([id(image) for image in second.images], [id(image) for image in first.images])
        staple.solve()
        self.assertEqual(staple.trueSegmentation.shape, (3, 3, 2))

    def testSolveStaple(self):
        trueSegmentation, p, q = solveStaple(self.matcher(np.ones((3, 3)), np.ones((3, 3))), maxIterations=3)
        self.assertEqual(trueSegmentation.shape, (3, 3, 1))
        np.testing.assert_array_equal(p, [1, 1])
        np.testing.assert_array_equal(q, [1, 1])


class StapleRatersTestCase(unittest.TestCase):
    """Five raters of a 20 pixel row. The first is the expert, the others deviate from it."""

    def setUp(self):
        image = Image2D(gridSize=(20, 1))
        decisions = [
            [1, 1, 1, 1, 1, 0, 0, 0, 0, 0, 1, 1, 1, 1, 1, 0, 0, 0, 0, 0],  # expert
            [1, 1, 1, 1, 0, 0, 0, 0, 0, 0, 0, 1, 1, 1, 0, 0, 0, 0, 0, 0],  # missing 3
            [1, 1, 1, 1, 1, 1, 0, 1, 0, 1, 1, 1, 1, 1, 1, 1, 0, 0, 0, 0],  # 4 false positives
            [1, 0, 0, 1, 1, 0, 0, 0, 0, 0, 1, 1, 0, 1, 1, 0, 0, 0, 0, 0],  # missing 3
            [1, 1, 1, 0, 1, 0, 0, 0, 0, 1, 1, 1, 1, 1, 1, 1, 0, 0, 1, 1],  # missing 1, 4 false positives
        ]
        self.expert = np.array(decisions[0], dtype=np.uint8)
        volumes = [BinVolume([BinImage(np.array(d, dtype=np.uint8).reshape(20, 1), image)]) for d in decisions]
        self.matcher = BinMatcher(volumes)
        self.expectedSensitivity = [1.0, 0.7, 1.0, 0.7, 0.9]
        self.expectedSpecificity = [1.0, 1.0, 0.6, 1.0, 0.6]

    def testPerformance(self):
        staple = Staple(self.matcher)
        staple.solve()
        np.testing.assert_array_almost_equal(staple.p, self.expectedSensitivity, decimal=2)
        np.testing.assert_array_almost_equal(staple.q, self.expectedSpecificity, decimal=2)
        np.testing.assert_array_almost_equal(staple.phi, [self.expectedSensitivity, self.expectedSpecificity], decimal=2)
        np.testing.assert_array_equal(staple.trueSegmentation.ravel(), self.expert)

    def testScoresStoredOnVolumes(self):
        Staple(self.matcher).solve()
        ranked = self.matcher.bySensitivity()
        self.assertAlmostEqual(ranked[-1].sensitivity, 0.7, places=2)
        np.testing.assert_array_equal(self.matcher.master.imageArray().ravel(), self.expert)

    def testRemoveEmptyIndices(self):
        staple = Staple(self.matcher)
        staple.removeEmptyIndices()
        # columns 6, 8, 16 and 17 are empty for every rater
        self.assertEqual(staple.n, 16)
        staple.solve()
        self.assertEqual(staple.trueSegmentation.shape, (20, 1, 1))
        np.testing.assert_array_equal(staple.trueSegmentation.ravel(), self.expert)
        np.testing.assert_array_almost_equal(staple.p, self.expectedSensitivity, decimal=2)
        self.assertEqual(staple.probabilityMap[6, 0, 0], 0.0)
        self.assertEqual(staple.probabilityMap[8, 0, 0], 0.0)
