import math
import unittest

from rtkit import InvalidArgumentError
from rtkit.processing.drr import Attenuation


class AttenuationTestCase(unittest.TestCase):
    def setUp(self):
        self.att = Attenuation(0.1)

    def testDefaultEnergy(self):
        att = Attenuation()
        self.assertEqual(att.energy, 0.05)
        self.assertAlmostEqual(att.acWater, 0.2269)

    def testTableEntry(self):
        self.assertAlmostEqual(self.att.acWater, 0.1707)
        self.assertEqual(self.att.density, 1.0)

    def testInterpolation(self):
        self.assertAlmostEqual(Attenuation(0.055).acWater, 0.2164)

    def testBeyondTable(self):
        self.assertAlmostEqual(Attenuation(20).acWater, 0.01813)
        self.assertAlmostEqual(Attenuation(50).acWater, 0.01813)

    def testEnergyChangeUpdatesCoefficient(self):
        self.att.energy = 1.0
        self.assertAlmostEqual(self.att.acWater, 0.07072)

    def testInvalidEnergy(self):
        for energy in (0, -0.1, '0.1', None):
            self.assertRaises(InvalidArgumentError, lambda: Attenuation(energy))

    def testAttenuationCoefficient(self):
        self.assertAlmostEqual(self.att.attenuationCoefficient(-1000), 0.0)
        self.assertAlmostEqual(self.att.attenuationCoefficient(0), 0.1707)
        self.assertAlmostEqual(self.att.attenuationCoefficient(3000), 0.6828)

    def testAttenuation(self):
        self.assertAlmostEqual(self.att.attenuation(0, 10), 1 - 0.8431, places=4)
        self.assertAlmostEqual(self.att.attenuation(3000, 10), 1 - 0.5052, places=4)
        self.assertAlmostEqual(self.att.attenuation(-1000, 100), 0.0)

    def testVectorAttenuation(self):
        value = self.att.vectorAttenuation([3000, 0, -1000], [10, 10, 100])
        self.assertAlmostEqual(value, 1 - 0.4259, places=4)
        self.assertAlmostEqual(value, 1 - math.exp(-0.8535))

    def testVectorAttenuationEqualsSequentialAttenuation(self):
        transmitted = (1 - self.att.attenuation(3000, 10)) * (1 - self.att.attenuation(0, 10))
        self.assertAlmostEqual(self.att.vectorAttenuation([3000, 0], [10, 10]), 1 - transmitted)

    def testVectorAttenuationUnequalLengths(self):
        self.assertRaises(InvalidArgumentError, lambda: self.att.vectorAttenuation([0, 0], [10]))
