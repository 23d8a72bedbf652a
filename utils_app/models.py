from django.db import models


class Repository(models.Model):
    name = models.CharField(max_length=100, unique=True)

    def __str__(self):
        return self.name


class GitObject(models.Model):
    """One pushed object, stored as its uncompressed preimage."""
    repo = models.ForeignKey(Repository, on_delete=models.CASCADE, related_name="git_objects")
    oid = models.CharField(max_length=40, db_index=True)
    kind = models.CharField(max_length=10, choices=[('blob', 'Blob'), ('tree', 'Tree'), ('commit', 'Commit')])
    data = models.BinaryField()

    class Meta:
        unique_together = ('repo', 'oid')


class Reference(models.Model):
    """Stores branch pointers like 'refs/heads/master'"""
    repo = models.ForeignKey(Repository, on_delete=models.CASCADE, related_name="refs")
    name = models.CharField(max_length=255)
    commit_oid = models.CharField(max_length=40)

    class Meta:
        unique_together = ('repo', 'name')
