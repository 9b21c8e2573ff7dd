"""
Used to summarize the quality of a fitted release policy.
"""
import hydroeval as he
import numpy as np

from dampolicy.config import FIT_METRICS


class ObjectiveCalculator():
    """
    Goodness-of-fit metrics between observed and fitted releases.

    Example usage:
    ObjFunc = ObjectiveCalculator(metrics=['nse', 'rmse'])
    obs = [1, 2, 3, 4, 5]
    sim = [1.1, 2.2, 3.3, 4.4, 5.5]
    scores = ObjFunc.calculate(obs, sim)

    Uses the hydroeval package for the calculations:
    https://thibhlln.github.io/hydroeval/index.html

    Hallouin, T. (2025). hydroeval: an evaluator for streamflow time series
        in Python. Zenodo. https://doi.org/10.5281/zenodo.2591217
    """
    valid_metrics = ["nse", "rmse", "kge", "pbias"]

    def __init__(self, metrics=FIT_METRICS):
        for m in metrics:
            if m not in self.valid_metrics:
                raise ValueError(f"Invalid metric: {m}\nValid metrics: {self.valid_metrics}")
        self.metrics = list(metrics)

    def validate_inputs(self, obs, sim):
        if len(obs) != len(sim):
            raise ValueError("obs and sim data must be the same length.")

    def calculate(self, obs, sim):
        """
        Returns a dict of {metric: value} for the configured metrics.
        """
        self.validate_inputs(obs, sim)
        obs = np.asarray(obs, dtype=float)
        sim = np.asarray(sim, dtype=float)

        scores = {}
        for metric in self.metrics:
            value = getattr(self, metric)(obs=obs, sim=sim)
            # hydroeval returns one row per component; keep the total
            scores[metric] = float(np.asarray(value).ravel()[0])
        return scores

    def nse(self, obs, sim):
        """
        Nash-Sutcliffe Efficiency (NSE)
        """
        return he.evaluator(he.nse, sim, obs)

    def rmse(self, obs, sim):
        """
        Root Mean Squared Error (RMSE)
        """
        return he.evaluator(he.rmse, sim, obs)

    def kge(self, obs, sim):
        """
        Kling-Gupta Efficiency (KGE)

        Note: all 4 KGE components are returned,
        but only the total KGE is kept.
        """
        return he.evaluator(he.kge, sim, obs)

    def pbias(self, obs, sim):
        """
        Percent Bias (PBIAS)
        """
        return he.evaluator(he.pbias, sim, obs)
