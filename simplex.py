#
# N-dimensional simplex noise evaluated over whole numpy point arrays.
#
# Based on example code by Stefan Gustavson (stegu@itn.liu.se), using his
# 2012 rank ordering method to find the simplex a point falls in.
#
# This code was placed in the public domain by its original author,
# Stefan Gustavson. You may use it as you see fit, but
# attribution is appreciated.
#
import itertools
import numpy


p = numpy.array( [151,160,137,91,90,15,
    131,13,201,95,96,53,194,233,7,225,140,36,103,30,69,142,8,99,37,240,21,10,23,
    190, 6,148,247,120,234,75,0,26,197,62,94,252,219,203,117,35,11,32,57,177,33,
    88,237,149,56,87,174,20,125,136,171,168, 68,175,74,165,71,134,139,48,27,166,
    77,146,158,231,83,111,229,122,60,211,133,230,220,105,92,41,55,46,245,40,244,
    102,143,54, 65,25,63,161, 1,216,80,73,209,76,132,187,208, 89,18,169,200,196,
    135,130,116,188,159,86,164,100,109,198,173,186, 3,64,52,217,226,250,124,123,
    5,202,38,147,118,126,255,82,85,212,207,206,59,227,47,16,58,17,182,189,28,42,
    223,183,170,213,119,248,152, 2,44,154,163, 70,221,153,101,155,167, 43,172,9,
    129,22,39,253, 19,98,108,110,79,113,224,232,178,185, 112,104,218,246,97,228,
    251,34,242,193,238,210,144,12,191,179,162,241, 81,51,145,235,249,14,239,107,
    49,192,214, 31,181,199,106,157,184, 84,204,176,115,121,50,45,127, 4,150,254,
    138,236,205,93,222,114,67,29,24,72,243,141,128,195,78,66,215,61,156,180] )

# Contribution radius and the scale that maps the summed corners back to [-1,1].
RADIUS = 0.5
SCALE = 2**6


def fastfloor(x):
    return numpy.floor(x).astype(numpy.int64)


def _gradient_table(n):
    # Edge and corner directions of the n-cube: every {-1,0,1} vector with at
    # most one zero component.
    grad = numpy.array(list(itertools.product((0, -1, 1), repeat=n))[1:])
    return grad[numpy.abs(grad).sum(-1) >= n - 1]


class SimplexNoise(object):
    '''
    Seeded simplex noise. `noise` takes an (M, N) array of M points in N
    dimensions and returns M values in [-1, 1]. The same seed always gives the
    same field; seed None uses Ken Perlin's reference permutation.
    '''
    def __init__(self, seed=None):
        self.seed = seed
        if seed is None:
            table = p
        else:
            table = numpy.random.RandomState(seed & 0xFFFFFFFF).permutation(256)
        # Doubled so nested lookups never need to wrap.
        self.perm = numpy.concatenate([table, table]).astype(numpy.int64)
        self._gradients = {}

    def gradients(self, n):
        grad = self._gradients.get(n)
        if grad is None:
            grad = self._gradients[n] = _gradient_table(n)
        return grad

    def noise(self, Z):
        Z = numpy.atleast_2d(numpy.asarray(Z, dtype=numpy.float64))
        N = Z.shape[-1] #number of dimensions
        N1 = N + 1 #corners per simplex
        Fn = (N1**0.5 - 1) / N
        Gn = (N1 - N1**0.5) / N / N1

        # Skew into the simplex lattice. The lattice cell stays unwrapped so the
        # corner offsets are correct far from the origin; only the hash wraps.
        s = Z.sum(-1) * Fn
        cell = fastfloor(Z + s[:, numpy.newaxis])
        t = cell.sum(-1) * Gn
        z0 = Z - (cell - t[:, numpy.newaxis])

        # Rank each component by magnitude; corner b steps along the b largest.
        rank = numpy.zeros(Z.shape, dtype=numpy.int64)
        for l, k in itertools.combinations(range(N), 2):
            ge = z0[:, k] >= z0[:, l]
            rank[:, k] += ge
            rank[:, l] += ~ge
        b = numpy.arange(N1)[:, numpy.newaxis, numpy.newaxis]
        step = rank >= N - b #(N+1, M, N)
        zk = z0 - step + b * Gn

        lattice = (cell + step) & 255
        gik = 0
        for axis in range(N - 1, -1, -1):
            gik = self.perm[lattice[:, :, axis] + gik]
        grad = self.gradients(N)
        gik = gik % grad.shape[0]

        tk = RADIUS - (zk * zk).sum(-1)
        inside = tk > 0
        tk = numpy.where(inside, tk, 0.0)
        tk = tk * tk
        nk = tk * tk * (grad[gik] * zk).sum(-1)
        return numpy.clip(nk.sum(0) * SCALE, -1.0, 1.0)

    def sample(self, *axes):
        '''
        Broadcast the coordinate arrays in `axes` against each other and return
        noise values in the broadcast shape.
        '''
        grids = numpy.broadcast_arrays(*[numpy.asarray(a, dtype=numpy.float64) for a in axes])
        shape = grids[0].shape
        Z = numpy.stack([g.reshape(-1) for g in grids], axis=-1)
        return self.noise(Z).reshape(shape)


def noisen(Z, seed=None):
    s = SimplexNoise(seed)
    return s.noise(Z)


if __name__ == '__main__':
    import time

    t = time.time()
    arr2 = numpy.mgrid[0:8:0.1, 0:8:0.1].T
    shape2 = arr2.shape
    arr2 = arr2.reshape((shape2[0]*shape2[1], 2))
    arr3 = numpy.mgrid[0:8:0.1, 0:8:0.1, 0:8:0.1].T
    shape3 = arr3.shape
    arr3 = arr3.reshape((shape3[0]*shape3[1]*shape3[2], 3))
    print('mgrid', time.time()-t)

    t = time.time()
    n = noisen(arr2, seed=3332)
    print('arr2 noise', time.time()-t)
    t = time.time()
    n3 = noisen(arr3)
    print('arr3 noise', time.time()-t)
    print('STATS')
    print('######')
    print(n.min(), n.max(), numpy.average(n))
    print(n3.min(), n3.max(), numpy.average(n3))
