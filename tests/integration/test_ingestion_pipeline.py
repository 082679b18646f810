"""
Integration tests for the ingestion pipeline

Runs real CSV files through header validation, mapping, batching and the
retrying writer into an in-memory store.
"""

import pytest

from influx_loader.batch import IngestionPipeline, PipelineState
from influx_loader.core.errors import ConfigError, ReadError, WriteRetriesExhausted
from influx_loader.core.models import ValueKind
from influx_loader.observability import metrics


CSV_HEADER = "timestamp,host,cpu,ok\n"
JAN_1_2024_NS = 1_704_067_200_000_000_000


def data_rows(count: int) -> str:
    return "".join(
        f"2024-01-01 00:00:{i:02d},server{i % 3},{i}.5,true\n" for i in range(count)
    )


@pytest.mark.integration
class TestIngestionPipeline:
    """Integration tests for IngestionPipeline"""

    def test_loads_fixture(self, make_config, fake_store, fake_sleep, test_data_dir):
        pipeline = IngestionPipeline(make_config(batch_size=2), fake_store, sleep=fake_sleep)

        summary = pipeline.load_file(test_data_dir / "cpu.csv")

        assert summary.rows_read == 5
        assert summary.points_written == 4
        assert summary.rows_skipped == 1
        assert summary.batches_flushed == 2
        assert [len(b) for b in fake_store.batches] == [2, 2]
        assert pipeline.state is PipelineState.DONE

        first = fake_store.points[0]
        assert first.tags == {"host": "serverA"}
        assert first.fields["cpu"].value == 93.5
        assert first.timestamp == JAN_1_2024_NS
        assert set(fake_store.points[1].fields) == {"ok"}

    @pytest.mark.parametrize("rows,batch_size,expected", [
        (5, 2, [2, 2, 1]),
        (4, 2, [2, 2]),
        (3, 3, [3]),
        (1, 5000, [1]),
        (7, 1, [1] * 7),
    ])
    def test_batch_boundaries(self, make_config, fake_store, fake_sleep, write_csv, rows, batch_size, expected):
        path = write_csv(CSV_HEADER + data_rows(rows))
        pipeline = IngestionPipeline(make_config(batch_size=batch_size), fake_store, sleep=fake_sleep)

        summary = pipeline.load_file(path)

        assert [len(b) for b in fake_store.batches] == expected
        assert summary.points_written == rows
        assert summary.batches_flushed == len(expected)

    def test_point_order_preserved(self, make_config, fake_store, fake_sleep, write_csv):
        path = write_csv(CSV_HEADER + data_rows(6))
        IngestionPipeline(make_config(batch_size=4), fake_store, sleep=fake_sleep).load_file(path)

        assert [p.fields["cpu"].value for p in fake_store.points] == [0.5, 1.5, 2.5, 3.5, 4.5, 5.5]

    def test_header_only(self, make_config, fake_store, fake_sleep, write_csv):
        path = write_csv(CSV_HEADER)
        summary = IngestionPipeline(make_config(), fake_store, sleep=fake_sleep).load_file(path)

        assert summary.points_written == 0
        assert fake_store.write_attempts == []

    def test_empty_input(self, make_config, fake_store, fake_sleep, write_csv):
        pipeline = IngestionPipeline(make_config(), fake_store, sleep=fake_sleep)
        summary = pipeline.load_file(write_csv(""))

        assert summary.rows_read == 0
        assert fake_store.write_attempts == []
        assert pipeline.state is PipelineState.DONE

    def test_invalid_header_writes_nothing(self, make_config, fake_store, fake_sleep, write_csv):
        path = write_csv("time,host,cpu\n2024-01-01 00:00:00,a,1\n")
        pipeline = IngestionPipeline(make_config(), fake_store, sleep=fake_sleep)

        with pytest.raises(ConfigError, match="Timestamp column"):
            pipeline.load_file(path)
        assert fake_store.write_attempts == []

    def test_read_error_keeps_earlier_batches(self, make_config, fake_store, fake_sleep, write_csv):
        path = write_csv(CSV_HEADER + data_rows(3) + "2024-01-01 00:00:09,a,1\n" + data_rows(2))
        pipeline = IngestionPipeline(make_config(batch_size=2), fake_store, sleep=fake_sleep)

        with pytest.raises(ReadError, match="line 5"):
            pipeline.load_file(path)
        assert [len(b) for b in fake_store.batches] == [2]
        assert len(pipeline.accumulator) == 1

    def test_transient_failures_are_retried(self, make_config, store_factory, fake_sleep, sleeps, write_csv):
        store = store_factory(fail_writes=2)
        path = write_csv(CSV_HEADER + data_rows(3))
        config = make_config(batch_size=2, backoff_min_seconds=0.5, backoff_max_seconds=5.0)

        summary = IngestionPipeline(config, store, sleep=fake_sleep).load_file(path)

        assert summary.points_written == 3
        assert summary.write_retries == 2
        assert sleeps == [0.5, 1.0]
        assert [len(b) for b in store.batches] == [2, 1]

    def test_retries_exhausted_aborts_run(self, make_config, store_factory, fake_sleep, write_csv):
        store = store_factory(fail_writes=-1)
        path = write_csv(CSV_HEADER + data_rows(5))
        pipeline = IngestionPipeline(make_config(batch_size=2, max_write_attempts=3), store, sleep=fake_sleep)

        with pytest.raises(WriteRetriesExhausted):
            pipeline.load_file(path)

        assert len(store.write_attempts) == 3
        assert store.batches == []
        # Reading stopped at the first full batch
        assert pipeline.summary.rows_read == 2

    def test_verify_count_queries_after_each_flush(self, make_config, fake_store, fake_sleep, write_csv):
        path = write_csv(CSV_HEADER + data_rows(3))
        config = make_config(batch_size=2, verify_count=True, measurement_name="cpu")

        IngestionPipeline(config, fake_store, sleep=fake_sleep).load_file(path)

        assert fake_store.count_queries == [("cpu", "cpu"), ("cpu", "cpu")]

    def test_no_count_queries_by_default(self, make_config, fake_store, fake_sleep, write_csv):
        path = write_csv(CSV_HEADER + data_rows(3))
        IngestionPipeline(make_config(batch_size=2), fake_store, sleep=fake_sleep).load_file(path)
        assert fake_store.count_queries == []

    def test_unix_timestamps(self, make_config, fake_store, fake_sleep, write_csv):
        path = write_csv("time,host,value\n1704067200000000000,a,1\nnot-a-time,a,2\n")
        config = make_config(timestamp_column="time", timestamp_format="unix")

        summary = IngestionPipeline(config, fake_store, sleep=fake_sleep).load_file(path)

        assert summary.points_written == 2
        assert summary.timestamp_errors == 1
        assert fake_store.points[0].timestamp == JAN_1_2024_NS
        assert fake_store.points[1].timestamp is None

    def test_sub_microsecond_unix_times_stay_distinct(self, make_config, fake_store, fake_sleep, write_csv):
        path = write_csv("time,host,value\n1704067200000000001,a,1\n1704067200000000999,a,2\n")
        config = make_config(timestamp_column="time", timestamp_format="unix")

        IngestionPipeline(config, fake_store, sleep=fake_sleep).load_file(path)

        assert [p.timestamp for p in fake_store.points] == [1_704_067_200_000_000_001, 1_704_067_200_000_000_999]

    def test_out_of_range_integer_is_written_as_float(self, make_config, fake_store, fake_sleep, write_csv):
        path = write_csv(CSV_HEADER + "2024-01-01 00:00:00,a,99999999999999999999,true\n")

        IngestionPipeline(make_config(), fake_store, sleep=fake_sleep).load_file(path)

        assert fake_store.points[0].fields["cpu"].kind is ValueKind.FLOAT

    def test_duplicate_header_column_writes_nothing(self, make_config, fake_store, fake_sleep, write_csv):
        path = write_csv("timestamp,host,cpu,cpu\n2024-01-01 00:00:00,a,1,2\n")

        with pytest.raises(ConfigError, match="more than once"):
            IngestionPipeline(make_config(), fake_store, sleep=fake_sleep).load_file(path)
        assert fake_store.write_attempts == []

    def test_run_accepts_any_row_iterable(self, make_config, fake_store, fake_sleep):
        rows = [
            ["timestamp", "host", "cpu"],
            ["2024-01-01 00:00:00", "a", "1"],
            ["2024-01-01 00:00:01", "b", ""],
        ]
        summary = IngestionPipeline(make_config(), fake_store, sleep=fake_sleep).run(rows)

        assert summary.points_written == 1
        assert summary.rows_skipped == 1

    def test_metrics_updated(self, make_config, fake_store, fake_sleep, write_csv):
        measurement = "metrics_probe"
        before_read = metrics.get_counter_value(metrics.rows_read_total, measurement=measurement)
        before_written = metrics.get_counter_value(metrics.points_written_total, measurement=measurement)
        before_skipped = metrics.get_counter_value(
            metrics.rows_skipped_total, measurement=measurement, reason="no_fields"
        )

        path = write_csv(CSV_HEADER + data_rows(2) + "2024-01-01 00:00:09,a,,\n")
        config = make_config(measurement_name=measurement)
        IngestionPipeline(config, fake_store, sleep=fake_sleep).load_file(path)

        assert metrics.get_counter_value(metrics.rows_read_total, measurement=measurement) == before_read + 3
        assert metrics.get_counter_value(metrics.points_written_total, measurement=measurement) == before_written + 2
        assert metrics.get_counter_value(
            metrics.rows_skipped_total, measurement=measurement, reason="no_fields"
        ) == before_skipped + 1
