from simhire.models.job import Job
from simhire.models.internship import Internship
from simhire.models.application import Application, InternshipApplication
from simhire.models.simulasi import SimulasiResult

__all__ = ["Job", "Internship", "Application", "InternshipApplication", "SimulasiResult"]
