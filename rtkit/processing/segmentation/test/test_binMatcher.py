import unittest

import numpy as np

from rtkit import InvalidArgumentError, UnsupportedOperationError
from rtkit.data.images import BinImage, BinVolume, Image2D
from rtkit.processing.segmentation import BinMatcher


def binVolume(values, image, name='BinVolume'):
    array = np.array(values, dtype=np.uint8).reshape(image.columns, image.rows)
    return BinVolume([BinImage(array, image)], name=name)


class BinMatcherTestCase(unittest.TestCase):
    def setUp(self):
        self.image = Image2D(gridSize=(10, 1))
        self.pOne = [1] + [0] * 9
        self.nOne = [1] * 9 + [0]

    def testInvalidArguments(self):
        self.assertRaises(InvalidArgumentError, lambda: BinMatcher(['volume']))
        self.assertRaises(InvalidArgumentError, lambda: BinMatcher(master='master'))
        self.assertRaises(InvalidArgumentError, lambda: BinMatcher().add(np.zeros((2, 2))))

    def testAddAndMaster(self):
        matcher = BinMatcher()
        volume = binVolume(self.pOne, self.image)
        matcher.add(volume)
        matcher.master = volume
        self.assertEqual(matcher.volumes, [volume])
        self.assertIs(matcher.master, volume)

    def testArrays(self):
        matcher = BinMatcher([binVolume(self.pOne, self.image), binVolume(self.nOne, self.image)])
        arrays = matcher.arrays()
        self.assertEqual(len(arrays), 2)
        self.assertEqual(arrays[0].shape, (10, 1, 1))
        self.assertEqual(arrays[1].ravel().tolist(), self.nOne)

    def testSensitivitySpecificity(self):
        volume = binVolume(self.nOne, self.image)
        matcher = BinMatcher([volume], master=binVolume(self.pOne, self.image))
        matcher.scoreSensitivitySpecificity()
        self.assertAlmostEqual(volume.sensitivity, 1.0)
        self.assertAlmostEqual(volume.specificity, 1 / 9)

    def testSensitivitySpecificityReversedRoles(self):
        volume = binVolume(self.pOne, self.image)
        matcher = BinMatcher([volume], master=binVolume(self.nOne, self.image))
        matcher.scoreSensitivitySpecificity()
        self.assertAlmostEqual(volume.sensitivity, 1 / 9)
        self.assertAlmostEqual(volume.specificity, 1.0)

    def testSensitivityWithoutPositives(self):
        volume = binVolume(self.pOne, self.image)
        matcher = BinMatcher([volume], master=binVolume([0] * 10, self.image))
        matcher.scoreSensitivitySpecificity()
        self.assertIsNone(volume.sensitivity)
        self.assertAlmostEqual(volume.specificity, 0.9)

    def testScoringWithoutMaster(self):
        volume = binVolume(self.pOne, self.image)
        matcher = BinMatcher([volume])
        matcher.scoreSensitivitySpecificity()
        matcher.scoreDice()
        self.assertIsNone(volume.sensitivity)
        self.assertIsNone(volume.dice)

    def testDice(self):
        image = Image2D(gridSize=(4, 1))
        volume = binVolume([1, 0, 1, 0], image)
        matcher = BinMatcher([volume], master=binVolume([1, 1, 0, 0], image))
        matcher.scoreDice()
        self.assertAlmostEqual(volume.dice, 0.5)

    def testDiceIdenticalAndDisjoint(self):
        same = binVolume(self.pOne, self.image)
        disjoint = binVolume([0] + [1] * 9, self.image)
        matcher = BinMatcher([same, disjoint], master=binVolume(self.pOne, self.image))
        matcher.scoreDice()
        self.assertAlmostEqual(same.dice, 1.0)
        self.assertAlmostEqual(disjoint.dice, 0.0)

    def testScoringShapeMismatch(self):
        volume = binVolume([1, 0, 1, 0], Image2D(gridSize=(4, 1)))
        matcher = BinMatcher([volume], master=binVolume(self.pOne, self.image))
        self.assertRaises(InvalidArgumentError, matcher.scoreDice)

    def testRanking(self):
        volumes = [binVolume(self.pOne, self.image, name=name) for name in ('a', 'b', 'c')]
        for volume, sensitivity, specificity in zip(volumes, (0.5, 0.9, None), (0.8, 0.1, 0.3)):
            volume.sensitivity = sensitivity
            volume.specificity = specificity
        matcher = BinMatcher(volumes)
        self.assertEqual([v.name for v in matcher.bySensitivity()], ['b', 'a', 'c'])
        self.assertEqual([v.name for v in matcher.bySpecificity()], ['a', 'c', 'b'])
        self.assertEqual(BinMatcher().bySensitivity(), [])


class BinMatcherAlignmentTestCase(unittest.TestCase):
    def setUp(self):
        self.images = [Image2D(gridSize=(2, 2), origin=(0, 0, z)) for z in (0.0, 3.0, 6.0)]

    def binImage(self, k, value=1):
        return BinImage(np.full((2, 2), value, dtype=np.uint8), self.images[k])

    def testFillBlanks(self):
        first = BinVolume([self.binImage(0), self.binImage(1)])
        second = BinVolume([self.binImage(2)])
        master = BinVolume([self.binImage(1)])
        matcher = BinMatcher([first, second], master=master)
        matcher.fillBlanks()

        for volume in (first, second, master):
            self.assertEqual(volume.frames, 3)
            self.assertEqual({id(image) for image in volume.images}, {id(image) for image in self.images})
        self.assertEqual(second.imageArray().sum(), 4)

    def testFillBlanksWithoutVolumes(self):
        BinMatcher().fillBlanks()

    def testSortVolumes(self):
        first = BinVolume([self.binImage(0, 1), self.binImage(2, 0), self.binImage(1, 0)])
        second = BinVolume([self.binImage(1, 0), self.binImage(0, 1), self.binImage(2, 0)])
        matcher = BinMatcher([first, second])
        matcher.sortVolumes()
        self.assertEqual([id(image) for image in second.images], [id(image) for image in first.images])
        np.testing.assert_array_equal(first.imageArray(sortSlices=False), second.imageArray(sortSlices=False))

    def testSortVolumesWithDifferentSlices(self):
        matcher = BinMatcher([BinVolume([self.binImage(0)]), BinVolume([self.binImage(0), self.binImage(1)])])
        self.assertRaises(UnsupportedOperationError, matcher.sortVolumes)

        matcher = BinMatcher([BinVolume([self.binImage(0)]), BinVolume([self.binImage(1)])])
        self.assertRaises(UnsupportedOperationError, matcher.sortVolumes)
